# API payload models

from .auth import UserProfile, AuthResponse, EmailCheck, RegistrationForm
from .product import Product, ProductList
from .cart import Cart, CartItem, CartSummary, AddToCartRequest, VariantChange
from .wishlist import Wishlist, WishlistItem
from .account import Address, AddressList, CreatedAddress, SavedCard
from .checkout import ShippingDetails, CardDetails, Order, OrderItem, CheckoutReceipt, OrderList

__all__ = [
    "UserProfile",
    "AuthResponse",
    "EmailCheck",
    "RegistrationForm",
    "Product",
    "ProductList",
    "Cart",
    "CartItem",
    "CartSummary",
    "AddToCartRequest",
    "VariantChange",
    "Wishlist",
    "WishlistItem",
    "Address",
    "AddressList",
    "CreatedAddress",
    "SavedCard",
    "ShippingDetails",
    "CardDetails",
    "Order",
    "OrderItem",
    "CheckoutReceipt",
    "OrderList",
]
