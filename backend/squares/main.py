from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required
from squares import db
from squares.identity import current_identity
from squares.models import User

main = Blueprint('main', __name__)

@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the Super Bowl squares pool!'})

@main.route('/login', methods=['POST', 'OPTIONS'])
def login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    email = (data.get('email') or '').strip().lower()
    user = User.query.filter_by(email=email).first()
    if user and user.check_password(data.get('password') or ''):
        login_user(user, remember=True)
        current_app.logger.info(f"[sign-in] user={user.id}")
        return jsonify({"success": True, "identity": current_identity().to_dict()})
    return jsonify({"success": False, "error": "Invalid email or password"}), 401

@main.route('/register', methods=['POST', 'OPTIONS'])
def register():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    email = (data.get('email') or '').strip().lower()
    display_name = (data.get('display_name') or '').strip()
    password = data.get('password') or ''
    if not all([email, display_name, password]):
        return jsonify({"success": False, "error": "Email, display name and password are required"}), 400
    if User.query.filter_by(email=email).first():
        return jsonify({"success": False, "error": "Email already registered"}), 400

    new_user = User(email=email, display_name=display_name)
    new_user.set_password(password, method=current_app.config.get('PASSWORD_HASH_METHOD', 'pbkdf2:sha256'))
    db.session.add(new_user)
    db.session.commit()
    login_user(new_user)
    return jsonify({"success": True, "identity": current_identity().to_dict()}), 201

@main.route('/me', methods=['GET'])
def me():
    identity = current_identity()
    return jsonify({"identity": identity.to_dict() if identity else None})

@main.route('/logout', methods=['POST', 'OPTIONS'])
@login_required
def logout():
    logout_user()
    return jsonify({"success": True})
