from flask import Blueprint

admin_bp = Blueprint("admin", __name__, url_prefix="/admin")

# importing the modules attaches their views
from . import item_routes     # items + image uploads
from . import order_routes    # orders
