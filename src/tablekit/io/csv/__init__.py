from .writer import CsvWriter, write_table_csv

__all__ = ["CsvWriter", "write_table_csv"]
