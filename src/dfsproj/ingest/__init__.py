"""Input adapters that normalize raw salary exports."""

from .salaries import (
    DEFAULT_SALARY_MAPPING,
    SalaryRow,
    load_salary_csv,
    parse_salary_csv,
    rows_to_records,
)

__all__ = [
    "DEFAULT_SALARY_MAPPING",
    "SalaryRow",
    "load_salary_csv",
    "parse_salary_csv",
    "rows_to_records",
]
