from core.imports import Blueprint, jsonify, jwt_required, request
from core.auth import current_user_id, current_role, roles_required, STAFF_ROLES
from core.parsing import get_json_body, require_fields, parse_optional_int
from services import consultationService

consultations_bp = Blueprint('consultations', __name__)


@consultations_bp.route('/api/consultations', methods=['POST'])
@jwt_required()
def create_consultation():
    """
    Ask a pharmacist a question
    ---
    tags:
      - Consultations
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - subject
            - message
          properties:
            subject:
              type: string
              example: "Ibuprofen with blood pressure medication"
            message:
              type: string
              example: "Can I take ibuprofen while on lisinopril?"
    responses:
      201:
        description: Consultation opened with status pending
    """
    data = get_json_body(request)
    require_fields(data, 'subject', 'message')

    consultation = consultationService.create_consultation(
        current_user_id(),
        subject=data['subject'],
        message=data['message']
    )

    return jsonify({"message": "Consultation submitted", "consultation": consultation.to_dict()}), 201


@consultations_bp.route('/api/consultations', methods=['GET'])
@jwt_required()
def my_consultations():
    consultations = consultationService.get_user_consultations(current_user_id())
    return jsonify({"consultations": [c.to_dict() for c in consultations]}), 200


@consultations_bp.route('/api/consultations/pending', methods=['GET'])
@roles_required(*STAFF_ROLES)
def pending_consultations():
    consultations = consultationService.get_pending_consultations()
    return jsonify({"consultations": [c.to_dict() for c in consultations]}), 200


@consultations_bp.route('/api/consultations/<int:consultation_id>/assign', methods=['POST'])
@roles_required(*STAFF_ROLES)
def assign_consultation(consultation_id):
    """
    Staff: Assign a consultation to a pharmacist
    ---
    tags:
      - Consultations
    security:
      - Bearer: []
    parameters:
      - name: consultation_id
        in: path
        type: integer
        required: true
      - name: body
        in: body
        required: false
        schema:
          type: object
          properties:
            pharmacist_id:
              type: integer
              description: Defaults to the caller when the caller is a pharmacist
              example: 2
    responses:
      200:
        description: Consultation is now in_progress
      400:
        description: pharmacist_id missing for an admin caller, or not a pharmacist or admin
      404:
        description: Consultation not found
    """
    data = request.get_json(silent=True) or {}
    pharmacist_id = parse_optional_int(data.get('pharmacist_id'), 'pharmacist_id')
    if pharmacist_id is None:
        if current_role() != "pharmacist":
            require_fields(data, 'pharmacist_id')
        pharmacist_id = current_user_id()

    consultation = consultationService.assign_consultation(consultation_id, pharmacist_id)

    return jsonify({"message": "Consultation assigned", "consultation": consultation.to_dict()}), 200


@consultations_bp.route('/api/consultations/<int:consultation_id>/respond', methods=['POST'])
@roles_required(*STAFF_ROLES)
def respond_to_consultation(consultation_id):
    """
    Pharmacist: Answer an assigned consultation
    ---
    tags:
      - Consultations
    security:
      - Bearer: []
    parameters:
      - name: consultation_id
        in: path
        type: integer
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - response
          properties:
            response:
              type: string
              example: "Short courses are usually fine; check your blood pressure."
    responses:
      200:
        description: Consultation completed
      404:
        description: Consultation not found or not assigned to the caller
    """
    data = get_json_body(request)
    require_fields(data, 'response')

    consultation = consultationService.respond_to_consultation(
        consultation_id,
        current_user_id(),
        data['response']
    )

    return jsonify({"message": "Response sent", "consultation": consultation.to_dict()}), 200
