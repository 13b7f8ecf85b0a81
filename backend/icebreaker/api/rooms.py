from flask import Blueprint, jsonify, current_app
from flask_login import login_required

from icebreaker.api.payloads import as_int, as_text, json_body
from icebreaker.services.game import participants, rooms as room_service
from icebreaker.services.game.summary import summarize


rooms = Blueprint('rooms', __name__)


# ---- Admin ----

@rooms.route('', methods=['POST'])
@login_required
def create_room():
    data = json_body()
    expiry_hours = as_int(data, 'expiry_hours', required=False)
    if expiry_hours is None:
        expiry_hours = int(current_app.config.get('ROOM_DEFAULT_EXPIRY_HOURS', 24))
    room = room_service.create_room(expiry_hours, as_int(data, 'total_participants', required=False))
    return jsonify({'room': room.to_dict()}), 201


@rooms.route('', methods=['GET'])
@login_required
def list_rooms():
    return jsonify({'rooms': [r.to_dict() for r in room_service.list_active_rooms()]})


@rooms.route('/<int:room_id>/deactivate', methods=['POST'])
@login_required
def deactivate_room(room_id):
    room = room_service.deactivate(room_id)
    return jsonify({'room': room.to_dict()})


@rooms.route('/<int:room_id>/teams', methods=['PUT'])
@login_required
def assign_teams(room_id):
    data = json_body()
    room = room_service.assign_teams(room_id, data.get('teams'))
    return jsonify({'room': room.to_dict()})


@rooms.route('/<int:room_id>/partners', methods=['PUT'])
@login_required
def assign_partners(room_id):
    data = json_body()
    room = room_service.assign_partners(room_id, data.get('partners'))
    return jsonify({'room': room.to_dict()})


@rooms.route('/<int:room_id>/users', methods=['GET'])
@login_required
def room_users(room_id):
    return jsonify({'users': [u.to_dict() for u in participants.list_participants(room_id)]})


@rooms.route('/<int:room_id>/summary', methods=['GET'])
@login_required
def room_summary(room_id):
    return jsonify({'rows': [row.to_dict() for row in summarize(room_id)]})


# ---- Participants ----

@rooms.route('/<string:code>/validate', methods=['GET'])
def validate_code(code):
    room = room_service.get_joinable_room(code)
    return jsonify({'room': {'id': room.id, 'code': room.code}})


@rooms.route('/join', methods=['POST'])
def join_room():
    data = json_body()
    room = room_service.get_joinable_room(as_text(data, 'room_code'))
    user = participants.join(room.id, as_text(data, 'name'), as_int(data, 'seat_number'))
    return jsonify({'user': user.to_dict()})
