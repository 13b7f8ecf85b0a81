from flask import Blueprint, jsonify

from icebreaker.api.payloads import as_int, as_text, json_body
from icebreaker.services.game.answers import submit_answers
from icebreaker.services.game.pairing import start_session
from icebreaker.services.game.scoring import Pending, compute_result


sessions = Blueprint('sessions', __name__)


@sessions.route('/start', methods=['POST'])
def start():
    data = json_body()
    started = start_session(
        as_text(data, 'room_code'),
        as_text(data, 'my_name'),
        as_int(data, 'my_seat_number'),
        as_int(data, 'partner_seat_number', required=False),
    )
    return jsonify({'session': started.to_dict()})


@sessions.route('/<int:session_id>/answers', methods=['POST'])
def answers(session_id):
    data = json_body()
    submit_answers(session_id, as_int(data, 'user_id'), data.get('answers'))
    return jsonify({'ok': True})


@sessions.route('/<int:session_id>/results/<int:user_id>', methods=['GET'])
def results(session_id, user_id):
    outcome = compute_result(session_id, user_id)
    if isinstance(outcome, Pending):
        return jsonify({'status': 'pending', **outcome.to_dict()})
    return jsonify({'status': 'complete', 'result': outcome.to_dict()})
