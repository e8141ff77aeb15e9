from flask import Blueprint

sales = Blueprint('sales', __name__)

from retailpos.sales import models  # noqa: F401, E402  — registers Sale/SaleItem with SQLAlchemy
from retailpos.sales import routes  # noqa: F401, E402
