from flask_mail import Mail
from flask_migrate import Migrate
from flask_cors import CORS

mail = Mail()
migrate = Migrate()
cors = CORS()
