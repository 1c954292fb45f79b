# database/repositories/__init__.py
"""
Repository layer.

Import the repositories from their modules, e.g.

    from spareparts_pos.database.repositories.sales_repo import SalesRepo
    from spareparts_pos.database.repositories.errors import DomainError

This package module stays empty so the payment calculations can import
`errors` without pulling in every repository.
"""
