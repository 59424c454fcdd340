from marketplace.models.user import User
from marketplace.models.book import Book
from marketplace.models.cart import CartItem
from marketplace.models.order import Order
from marketplace.models.order_item import OrderItem

# add ALL models here
