from flask import Blueprint

catalog = Blueprint('catalog', __name__)

from retailpos.catalog import routes  # noqa: F401, E402
from retailpos.catalog import models  # noqa: F401, E402  — registers catalog tables with SQLAlchemy
