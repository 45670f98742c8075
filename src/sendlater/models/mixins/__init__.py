from sendlater.models.mixins.table import TableMixin, TableReadMixin

__all__ = ["TableMixin", "TableReadMixin"]
