import logging
import os
from dotenv import load_dotenv
load_dotenv()
from flask import Flask
from config import config_dict
from extensions import cors, mail, migrate
from models import db
from routes.learners import learner_bp
from manage import register_commands


def create_app(env=None):
    app = Flask(__name__)

    env = (env or os.environ.get("FLASK_ENV", "production")).lower()
    app.config.from_object(config_dict.get(env, config_dict["production"]))

    logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logging.getLogger().setLevel(app.config.get("LOG_LEVEL", "INFO"))
    app.logger.info("Environment: %s", env)

    cors.init_app(app, resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"]}}, supports_credentials=True)
    db.init_app(app)
    mail.init_app(app)
    migrate.init_app(app, db)

    @app.route('/')
    def home():
        return "Welcome to the LMS progress service!"

    app.register_blueprint(learner_bp, url_prefix='/api/learner')
    register_commands(app)

    return app


if __name__ == '__main__':
    app = create_app()
    app.run(debug=app.config['DEBUG'])
