# REST endpoints.
# Thin JSON wrappers around data_access; errors are rendered by the
# handlers in errors.py.

from flask import Blueprint, current_app, jsonify, request

from . import bootstrap
from . import data_access as dal

api = Blueprint("api", __name__, url_prefix="/api")


def _body():
    # None for missing/invalid JSON; the data access layer rejects it
    return request.get_json(silent=True)


def _list_args():
    """Common page/limit/search query-string arguments."""
    return {
        "page": request.args.get("page", 1, type=int),
        "limit": request.args.get("limit", current_app.config["DEFAULT_PAGE_SIZE"], type=int),
        "search": request.args.get("search", "").strip(),
    }


def _no_content():
    return "", 204


# ==================== PRODUCTS ====================

@api.route("/products", methods=["GET"])
def list_products():
    """
    Paginated product list.
    Query: page, limit, search (name/description/sku), category (category id).
    """
    page = dal.list_products(category=request.args.get("category", "").strip(), **_list_args())
    return jsonify(page.to_dict())


@api.route("/products", methods=["POST"])
def create_product():
    """
    Create a product and its inventory row.
    Unknown users fall back to the admin account; known category slugs are
    created on first use.
    """
    product = dal.create_product(_body())
    return jsonify(product.to_dict()), 201


@api.route("/products/<int:product_id>", methods=["GET"])
def get_product(product_id):
    return jsonify(dal.get_product(product_id).to_dict(include_suppliers=True))


@api.route("/products/<int:product_id>", methods=["PUT"])
def update_product(product_id):
    return jsonify(dal.update_product(product_id, _body()).to_dict())


@api.route("/products/<int:product_id>", methods=["DELETE"])
def delete_product(product_id):
    dal.delete_product(product_id)
    return _no_content()


# ==================== CATEGORIES ====================

@api.route("/categories", methods=["GET"])
def list_categories():
    return jsonify(dal.list_categories(**_list_args()).to_dict())


@api.route("/categories", methods=["POST"])
def create_category():
    return jsonify(dal.create_category(_body()).to_dict()), 201


@api.route("/categories/<category_id>", methods=["GET"])
def get_category(category_id):
    return jsonify(dal.get_category(category_id).to_dict())


@api.route("/categories/<category_id>", methods=["PUT"])
def update_category(category_id):
    return jsonify(dal.update_category(category_id, _body()).to_dict())


@api.route("/categories/<category_id>", methods=["DELETE"])
def delete_category(category_id):
    dal.delete_category(category_id)
    return _no_content()


# ==================== INVENTORY ====================

@api.route("/inventory", methods=["GET"])
def list_inventory():
    """
    Stock levels with their classification.
    Query: page, limit, search (product name/sku), status
    (in_stock | low_stock | out_of_stock).
    """
    page = dal.list_inventory(status=request.args.get("status", "").strip(), **_list_args())
    return jsonify(page.to_dict(include_product=True))


@api.route("/inventory/<int:product_id>", methods=["GET"])
def get_inventory(product_id):
    return jsonify(dal.get_inventory(product_id).to_dict(include_product=True))


@api.route("/inventory/<int:product_id>", methods=["PUT"])
def update_inventory(product_id):
    return jsonify(dal.update_inventory(product_id, _body()).to_dict(include_product=True))


# ==================== CUSTOMERS ====================

@api.route("/customers", methods=["GET"])
def list_customers():
    return jsonify(dal.list_customers(**_list_args()).to_dict())


@api.route("/customers", methods=["POST"])
def create_customer():
    return jsonify(dal.create_customer(_body()).to_dict()), 201


@api.route("/customers/<int:customer_id>", methods=["GET"])
def get_customer(customer_id):
    return jsonify(dal.get_customer(customer_id).to_dict())


@api.route("/customers/<int:customer_id>", methods=["PUT"])
def update_customer(customer_id):
    return jsonify(dal.update_customer(customer_id, _body()).to_dict())


@api.route("/customers/<int:customer_id>", methods=["DELETE"])
def delete_customer(customer_id):
    dal.delete_customer(customer_id)
    return _no_content()


# ==================== SUPPLIERS ====================

@api.route("/suppliers", methods=["GET"])
def list_suppliers():
    return jsonify(dal.list_suppliers(**_list_args()).to_dict())


@api.route("/suppliers", methods=["POST"])
def create_supplier():
    return jsonify(dal.create_supplier(_body()).to_dict()), 201


@api.route("/suppliers/<int:supplier_id>", methods=["GET"])
def get_supplier(supplier_id):
    return jsonify(dal.get_supplier(supplier_id).to_dict(include_products=True))


@api.route("/suppliers/<int:supplier_id>", methods=["PUT"])
def update_supplier(supplier_id):
    return jsonify(dal.update_supplier(supplier_id, _body()).to_dict())


@api.route("/suppliers/<int:supplier_id>", methods=["DELETE"])
def delete_supplier(supplier_id):
    dal.delete_supplier(supplier_id)
    return _no_content()


# ==================== SUPPLIER / PRODUCT LINKS ====================

@api.route("/suppliers/<int:supplier_id>/products", methods=["GET"])
def list_supplier_products(supplier_id):
    links = dal.list_supplier_products(supplier_id)
    return jsonify([link.to_dict(include_product=True) for link in links])


@api.route("/suppliers/<int:supplier_id>/products", methods=["POST"])
def add_supplier_product(supplier_id):
    link = dal.link_supplier_product(supplier_id, _body())
    return jsonify(link.to_dict(include_product=True)), 201


@api.route("/suppliers/<int:supplier_id>/products/<int:product_id>", methods=["DELETE"])
def remove_supplier_product(supplier_id, product_id):
    dal.unlink_supplier_product(supplier_id, product_id)
    return _no_content()


@api.route("/supplier-products", methods=["POST"])
def create_supplier_product():
    """Same as POST /suppliers/<id>/products with supplierId in the body."""
    link = dal.link_from_payload(_body())
    return jsonify(link.to_dict(include_product=True)), 201


# ==================== ORDERS ====================

@api.route("/orders", methods=["GET"])
def list_orders():
    args = _list_args()
    args.pop("search")
    page = dal.list_orders(status=request.args.get("status", "").strip(), **args)
    return jsonify(page.to_dict())


@api.route("/orders", methods=["POST"])
def create_order():
    return jsonify(dal.create_order(_body()).to_dict()), 201


@api.route("/orders/<int:order_id>", methods=["GET"])
def get_order(order_id):
    return jsonify(dal.get_order(order_id).to_dict())


@api.route("/orders/<int:order_id>", methods=["PUT"])
def update_order(order_id):
    return jsonify(dal.update_order(order_id, _body()).to_dict())


@api.route("/orders/<int:order_id>", methods=["DELETE"])
def delete_order(order_id):
    dal.delete_order(order_id)
    return _no_content()


# ==================== DASHBOARD & SEEDING ====================

@api.route("/dashboard", methods=["GET"])
def dashboard():
    return jsonify(dal.dashboard_summary())


@api.route("/seed/categories", methods=["POST"])
def seed_categories():
    result = bootstrap.seed_categories()
    return jsonify(result), 201 if result["seeded"] else 200


@api.route("/seed/users", methods=["POST"])
def seed_users():
    result = bootstrap.seed_users()
    return jsonify(result), 201 if result["seeded"] else 200
