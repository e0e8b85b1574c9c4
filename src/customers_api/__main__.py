"""Allow ``python -m customers_api``."""

from customers_api.main import run

run()
