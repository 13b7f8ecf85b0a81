from flask import Blueprint, request, jsonify, current_app
from flask_login import login_user, logout_user, login_required, current_user
from .models import Admin

main = Blueprint('main', __name__)

@main.route('/login', methods=['POST', 'OPTIONS'])
def login():
    if request.method == 'OPTIONS':
        return jsonify({'status': 'ok'}), 200
    data = request.get_json(silent=True) or {}
    admin = Admin.query.filter_by(username=data.get('username')).first()
    if admin and admin.check_password(data.get('password')):
        login_user(admin)
        current_app.logger.info(f"[admin-login] admin={admin.id}")
        return jsonify({"success": True, "admin": admin.to_dict()})
    return jsonify({"success": False, "error": "Invalid credentials"}), 401

@main.route('/me', methods=['GET'])
@login_required
def me():
    return jsonify({"success": True, "admin": current_user.to_dict()})

@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({"success": True})
