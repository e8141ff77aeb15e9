from flask import current_app, jsonify, abort
from sqlalchemy.exc import IntegrityError

from retailpos import db
from retailpos.cart.store import SALE_CART_KEY
from retailpos.cart.views import parse_int, payload, register_cart_routes
from retailpos.pricing.errors import PricingError
from retailpos.pricing.ledger import stock_on_hand
from retailpos.quotes.models import Quotation
from retailpos.quotes.services import load_quotation_into
from retailpos.sales import sales
from retailpos.sales.checkout import CheckoutError, validate_checkout
from retailpos.sales.models import Sale
from retailpos.sales.services import CommitError, commit_sale


# ── CART (shared endpoints, stock-limited) ────────────────────────

open_sale_cart = register_cart_routes(sales, SALE_CART_KEY, lambda: stock_on_hand)


# ── COMPLETE SALE ─────────────────────────────────────────────────

@sales.route('/complete', methods=['POST'])
def complete():
    """
    Finalise the sale:
      1. Price the cart and validate the payment
      2. Commit the sale (locks, stock check, deduction, numbering)
      3. Clear the cart
    """
    cs = open_sale_cart()
    data = payload()

    try:
        if cs.cart.is_empty:
            raise CommitError('Cart is empty. Add products before completing a sale.', 'empty_cart')
        totals = cs.totals()
        checkout = validate_checkout(
            totals.final_total,
            data.get('payment_method'),
            data.get('sale_type'),
            data.get('amount_received'),
            client_id=cs.cart.client_id,
            credit_term_days=current_app.config['CREDIT_TERM_DAYS'],
        )
        sale = commit_sale(cs.cart, cs.price_lists, totals, checkout,
                           quotation_id=parse_int(data, 'quotation_id', required=False))
        db.session.commit()

    except (CommitError, CheckoutError, PricingError) as exc:
        db.session.rollback()
        current_app.logger.warning(f"Sale rollback ({type(exc).__name__}): {exc}")
        status = 409 if getattr(exc, 'code', '') == 'insufficient_stock' else 400
        return jsonify({'error': str(exc), 'code': getattr(exc, 'code', 'commit_error')}), status

    except IntegrityError as exc:
        db.session.rollback()
        current_app.logger.error(f"Sale rollback (IntegrityError): {exc}")
        return jsonify({'error': 'A database error occurred. Please try again.',
                        'code': 'database_error'}), 500

    cs.clear()
    current_app.logger.info(f"Sale completed: {sale.number} | Total: {sale.total}")
    return jsonify(sale.to_dict()), 201


# ── LOAD QUOTATION INTO TERMINAL ──────────────────────────────────

@sales.route('/from-quote/<int:quotation_id>', methods=['POST'])
def from_quote(quotation_id):
    quotation = db.session.get(Quotation, quotation_id)
    if quotation is None:
        abort(404)

    cs = open_sale_cart()
    load_quotation_into(cs.ledger, quotation, cs.catalog.by_id)
    cs.save()

    body = cs.to_dict()
    body['quotation_id'] = quotation.id
    current_app.logger.info(f"Quotation {quotation.number} loaded into the sales terminal")
    return jsonify(body)


# ── SALE DETAIL ───────────────────────────────────────────────────

@sales.route('/<int:sale_id>')
def detail(sale_id):
    sale = db.session.get(Sale, sale_id)
    if sale is None:
        abort(404)
    return jsonify(sale.to_dict())
