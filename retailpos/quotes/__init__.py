from flask import Blueprint

quotes = Blueprint('quotes', __name__)

from retailpos.quotes import models  # noqa: F401, E402  — registers Quotation with SQLAlchemy
from retailpos.quotes import routes  # noqa: F401, E402
