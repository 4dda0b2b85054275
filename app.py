import logging
import os

from flask import Flask
from config import Config, instance_dir, log_level
from extensions import db


def create_app(config_object=Config):
    app = Flask(__name__)
    app.config.from_object(config_object)

    logging.basicConfig(
        level=log_level(app.config.get("LOG_LEVEL", "INFO")),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if app.config["SQLALCHEMY_DATABASE_URI"].startswith("sqlite:///" + instance_dir):
        os.makedirs(instance_dir, exist_ok=True)

    # init extentions
    db.init_app(app)

    # db models (registered on the metadata before create_all)
    import models.degree_plan      # noqa: F401
    import models.plan_placement   # noqa: F401
    import models.plan_solution    # noqa: F401

    # import and register blueprints
    from routes import plans_bp

    app.register_blueprint(plans_bp)

    return app


if __name__ == "__main__":
    create_app().run(debug=True)
