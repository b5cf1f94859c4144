from core.imports import Blueprint, jsonify, request, jwt_required
from core.auth import current_user_id, roles_required, STAFF_ROLES
from core.parsing import get_json_body, require_fields, parse_datetime
from services import prescriptionService

prescriptions_bp = Blueprint('prescriptions', __name__)


@prescriptions_bp.route('/api/prescriptions/upload-image', methods=['POST'])
@jwt_required()
def upload_prescription_image():
    """
    Upload a scanned prescription image
    ---
    tags:
      - Prescriptions
    summary: Store a prescription scan and get back its URL
    description: |
      The file is uploaded to Cloudinary. Pass the returned URL as image_url
      when submitting the prescription.
    consumes:
      - multipart/form-data
    security:
      - Bearer: []
    parameters:
      - in: formData
        name: file
        type: file
        required: true
        description: png, jpg, jpeg or pdf
    responses:
      200:
        description: Image uploaded
        schema:
          type: object
          properties:
            image_url:
              type: string
              example: "https://res.cloudinary.com/demo/image/upload/v1690000000/prescriptions/rx.jpg"
      400:
        description: Missing file or file type not allowed
      502:
        description: Image storage unavailable
    """
    url = prescriptionService.upload_prescription_image(request.files.get('file'), current_user_id())
    return jsonify({"image_url": url}), 200


@prescriptions_bp.route('/api/prescriptions', methods=['POST'])
@jwt_required()
def upload_prescription():
    """
    Submit a prescription for verification
    ---
    tags:
      - Prescriptions
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
            - doctor_name
            - doctor_license
            - prescription_date
            - image_url
          properties:
            doctor_name:
              type: string
              example: "Dr. Smith"
            doctor_license:
              type: string
              example: "LIC123456"
            prescription_date:
              type: string
              example: "2026-10-01"
            image_url:
              type: string
              example: "https://example.com/prescription.jpg"
    responses:
      201:
        description: Prescription stored with status pending
      400:
        description: Missing or invalid fields
    """
    data = get_json_body(request)
    require_fields(data, 'doctor_name', 'doctor_license', 'prescription_date', 'image_url')

    prescription = prescriptionService.upload_prescription(
        user_id=current_user_id(),
        doctor_name=data['doctor_name'],
        doctor_license=data['doctor_license'],
        prescription_date=parse_datetime(data['prescription_date'], 'prescription_date'),
        image_url=data['image_url']
    )

    return jsonify({"message": "Prescription uploaded", "prescription": prescription.to_dict()}), 201


@prescriptions_bp.route('/api/prescriptions', methods=['GET'])
@jwt_required()
def my_prescriptions():
    prescriptions = prescriptionService.get_user_prescriptions(current_user_id())
    return jsonify({"prescriptions": [p.to_dict() for p in prescriptions]}), 200


@prescriptions_bp.route('/api/prescriptions/pending', methods=['GET'])
@roles_required(*STAFF_ROLES)
def pending_prescriptions():
    prescriptions = prescriptionService.get_pending_prescriptions()
    return jsonify({"prescriptions": [p.to_dict() for p in prescriptions]}), 200


@prescriptions_bp.route('/api/prescriptions/<int:prescription_id>/verify', methods=['PATCH'])
@roles_required(*STAFF_ROLES)
def verify_prescription(prescription_id):
    """
    Staff: Verify or reject a prescription
    ---
    tags:
      - Prescriptions
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - name: prescription_id
        in: path
        type: integer
        required: true
      - name: body
        in: body
        required: true
        schema:
          type: object
          required:
            - status
          properties:
            status:
              type: string
              enum: [verified, rejected]
              example: verified
            notes:
              type: string
              example: "Dosage confirmed with prescriber"
    responses:
      200:
        description: Review recorded
      400:
        description: Invalid status
      403:
        description: Forbidden (not staff)
      404:
        description: Prescription not found
    """
    data = get_json_body(request)
    require_fields(data, 'status')

    prescription = prescriptionService.verify_prescription(
        prescription_id,
        verifier_id=current_user_id(),
        status=data['status'],
        notes=data.get('notes')
    )

    return jsonify({"message": f"Prescription {prescription.status}", "prescription": prescription.to_dict()}), 200
