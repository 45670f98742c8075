from .client import *
from .config import *
from .db import *
from .emails import *
from .mail import *
from .paths import *
from .scheduler import *
