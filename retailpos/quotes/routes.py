from datetime import date

from flask import current_app, jsonify, abort
from sqlalchemy.exc import IntegrityError

from retailpos import db
from retailpos.cart.store import QUOTE_CART_KEY
from retailpos.cart.views import payload, register_cart_routes
from retailpos.pricing.errors import PricingError
from retailpos.pricing.ledger import stock_on_hand
from retailpos.quotes import quotes
from retailpos.quotes.models import Quotation
from retailpos.quotes.services import commit_quotation, default_due_date
from retailpos.sales.services import CommitError


def quote_stock_policy():
    """Quotes may exceed current stock unless QUOTE_ENFORCE_STOCK is set."""
    return stock_on_hand if current_app.config.get('QUOTE_ENFORCE_STOCK') else None


open_quote_cart = register_cart_routes(quotes, QUOTE_CART_KEY, quote_stock_policy)


# ── FINALIZE ──────────────────────────────────────────────────────

@quotes.route('/finalize', methods=['POST'])
def finalize():
    cs = open_quote_cart()
    data = payload()

    try:
        raw_due = (data.get('due_date') or '').strip()
        due_date = date.fromisoformat(raw_due) if raw_due else \
            default_due_date(current_app.config['QUOTE_VALIDITY_DAYS'])
    except ValueError:
        return jsonify({'error': f'"{data.get("due_date")}" is not a valid date.',
                        'code': 'invalid_date'}), 400
    notes = data.get('notes')
    if notes is None:
        notes = current_app.config['QUOTE_DEFAULT_NOTES']

    try:
        quotation = commit_quotation(cs.cart, cs.price_lists, cs.totals(), due_date, notes)
        db.session.commit()

    except (CommitError, PricingError) as exc:
        db.session.rollback()
        current_app.logger.warning(f"Quotation rollback ({type(exc).__name__}): {exc}")
        return jsonify({'error': str(exc), 'code': exc.code}), 400

    except IntegrityError as exc:
        db.session.rollback()
        current_app.logger.error(f"Quotation rollback (IntegrityError): {exc}")
        return jsonify({'error': 'A database error occurred. Please try again.',
                        'code': 'database_error'}), 500

    cs.clear()
    current_app.logger.info(f"Quotation generated: {quotation.number} | Total: {quotation.total}")
    return jsonify(quotation.to_dict()), 201


# ── DETAIL ────────────────────────────────────────────────────────

@quotes.route('/<int:quotation_id>')
def detail(quotation_id):
    quotation = db.session.get(Quotation, quotation_id)
    if quotation is None:
        abort(404)
    return jsonify(quotation.to_dict())
