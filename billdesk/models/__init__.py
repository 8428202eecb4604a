# billdesk/models/__init__.py

from .clients import *
from .documents import *
# import every model file here
