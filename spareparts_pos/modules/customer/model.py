from PySide6.QtCore import QAbstractTableModel, Qt, QModelIndex


class CustomersTableModel(QAbstractTableModel):
    """
    Rows are Customer dataclasses. COLUMNS maps header -> attribute so the
    supplier list can reuse the model with its own columns.
    """

    COLUMNS = [
        ("ID", "id"),
        ("Name", "name"),
        ("Phone", "phone"),
        ("Email", "email"),
        ("Vehicle", "vehicle_info"),
    ]

    def __init__(self, rows: list):
        super().__init__()
        self._rows = rows

    def rowCount(self, parent=QModelIndex()):
        return len(self._rows)

    def columnCount(self, parent=QModelIndex()):
        return len(self.COLUMNS)

    def data(self, index, role=Qt.DisplayRole):
        if not index.isValid():
            return None
        r = self._rows[index.row()]
        if role in (Qt.DisplayRole, Qt.EditRole):
            value = getattr(r, self.COLUMNS[index.column()][1], None)
            return "" if value is None else value
        return None

    def headerData(self, section, orientation, role=Qt.DisplayRole):
        if orientation == Qt.Horizontal and role == Qt.DisplayRole:
            return self.COLUMNS[section][0]
        return super().headerData(section, orientation, role)

    def at(self, row: int):
        return self._rows[row]

    def replace(self, rows: list):
        self.beginResetModel()
        self._rows = rows
        self.endResetModel()
