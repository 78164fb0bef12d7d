# ged/__init__.py
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager
from flask_mail import Mail
from werkzeug.exceptions import HTTPException
from config import Config
import os

# === CRÉER LES OBJETS ===
db = SQLAlchemy()
login_manager = LoginManager()
mail = Mail()


def create_app(config_class=Config):
    app = Flask(__name__)
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # === CRÉER LE DOSSIER UPLOADS ===
    upload_folder = app.config['UPLOAD_FOLDER']
    if not os.path.exists(upload_folder):
        app.logger.info("Création du dossier d'upload : %s", upload_folder)
        os.makedirs(upload_folder, exist_ok=True)
    else:
        app.logger.debug("Dossier d'upload existant : %s", upload_folder)

    from ged.services.users import get_user, seed_defaults

    # === INIT DB, LOGIN MANAGER ET MAIL ===
    db.init_app(app)
    login_manager.init_app(app)
    mail.init_app(app)

    # === UTILISATEUR COURANT (en-tête ou utilisateur par défaut) ===
    @login_manager.request_loader
    def load_user_from_request(request):
        raw = request.headers.get(app.config['ACTING_USER_HEADER']) or app.config['DEFAULT_USER_ID']
        try:
            user_id = int(raw)
        except (TypeError, ValueError):
            return None
        return get_user(user_id)

    @login_manager.unauthorized_handler
    def unauthorized():
        return jsonify({"message": "Unknown acting user"}), 401

    # === GESTION DES ERREURS EN JSON ===
    from ged.errors import GEDError

    @app.errorhandler(GEDError)
    def handle_ged_error(e):
        if e.status_code >= 500:
            app.logger.error("%s (%s)", e.message, type(e).__name__)
        return jsonify({"message": e.message}), e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return jsonify({"message": e.description}), e.code

    # === BLUEPRINTS ===
    from .routes.folders import folders_bp
    from .routes.documents import documents_bp
    from .routes.dashboard import dashboard_bp
    from .routes.shares import shares_bp

    app.register_blueprint(folders_bp, url_prefix='/api/folders')
    app.register_blueprint(documents_bp, url_prefix='/api')
    app.register_blueprint(dashboard_bp, url_prefix='/api')
    app.register_blueprint(shares_bp, url_prefix='/share')

    # === COMMANDE CLI : flask seed ===
    @app.cli.command('seed')
    def seed_command():
        """Crée l'administrateur et l'arborescence par défaut."""
        if seed_defaults():
            print("Données par défaut créées.")
        else:
            print("Les données par défaut existent déjà.")

    with app.app_context():
        import ged.models  # noqa: F401
        db.create_all()
        if app.config.get('SEED_DEFAULTS'):
            try:
                seed_defaults()
            except Exception:
                db.session.rollback()
                app.logger.exception("Error creating default data")

    return app
