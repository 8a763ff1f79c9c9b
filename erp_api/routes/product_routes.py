from flask import request
from flask_jwt_extended import jwt_required

from . import main
from ..crud import product_crud
from ..schemas.products import ProductCreate, ProductUpdate, StockUpdateIn
from ..utils.api_response import load_payload, success_response
from ..utils.auth_utils import current_user_id


@main.route('/products', methods=['GET'])
@jwt_required()
def list_products():
    items, pagination = product_crud.list_products(request.args)
    return success_response(items, pagination=pagination)


@main.route('/products/low-stock', methods=['GET'])
@jwt_required()
def low_stock_products():
    return success_response(product_crud.get_low_stock_products())


@main.route('/products/stats', methods=['GET'])
@jwt_required()
def product_stats():
    return success_response(product_crud.get_product_stats())


@main.route('/products', methods=['POST'])
@jwt_required()
def create_product():
    payload = load_payload(ProductCreate)
    product = product_crud.create_product(payload, current_user_id())
    return success_response(product, 'Product created successfully', 201)


@main.route('/products/<string:id>', methods=['GET'])
@jwt_required()
def get_product(id):
    return success_response(product_crud.get_product_detail(id))


@main.route('/products/<string:id>', methods=['PUT'])
@jwt_required()
def update_product(id):
    payload = load_payload(ProductUpdate)
    product = product_crud.update_product(id, payload, current_user_id())
    return success_response(product, 'Product updated successfully')


@main.route('/products/<string:id>', methods=['DELETE'])
@jwt_required()
def delete_product(id):
    product_crud.delete_product(id, current_user_id())
    return success_response(message='Product deactivated successfully')


@main.route('/products/<string:id>/stock', methods=['PUT'])
@jwt_required()
def update_product_stock(id):
    payload = load_payload(StockUpdateIn)
    result = product_crud.update_stock(id, payload, current_user_id())
    return success_response(result, 'Stock updated successfully')
