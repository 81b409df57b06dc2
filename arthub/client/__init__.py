from arthub.client.api import ApiClient, ApiError
from arthub.client.cart import CartClient
from arthub.client.cart_view import CartView
from arthub.client.orders import CheckoutValidationError, OrderClient
