from PySide6.QtCore import QObject
from PySide6.QtWidgets import QWidget


class BaseModule(QObject):
    TITLE = ""

    def get_widget(self) -> QWidget:
        raise NotImplementedError

    def get_title(self) -> str:
        return self.TITLE
