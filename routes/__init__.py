from flask import Blueprint

# single JSON blueprint for the planner API
plans_bp = Blueprint("plans", __name__, url_prefix="/api")

#  import route modules so their handlers register on the blueprint
from . import errors     # noqa: F401
from . import plans      # noqa: F401
from . import generator_routes     # noqa: F401
