from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from campusconnect.routes.api.v1.common import actor, comment_data, page_args, paginated, request_data
from campusconnect.services import RequestService

api_request_bp = Blueprint("api_request", __name__)


@api_request_bp.get("")
def list_requests():
    page, per_page = page_args()
    requests = RequestService.list_requests(request.args, page=page, per_page=per_page)
    return jsonify(paginated(requests, lambda r: request_data(r, viewer=current_user)))


@api_request_bp.get("/search")
def search_requests():
    requests = RequestService.search_requests(request.args.get("q", "").strip())
    return jsonify({"requests": [request_data(r, viewer=current_user) for r in requests]})


@api_request_bp.get("/my-requests")
@login_required
def my_requests():
    requests = RequestService.requests_for_user(current_user.id)
    return jsonify({"requests": [request_data(r, viewer=current_user) for r in requests], "count": len(requests)})


@api_request_bp.get("/<int:request_id>")
def get_request(request_id):
    resource_request = RequestService.get_request(request_id)
    return jsonify({"request": request_data(resource_request, viewer=current_user, with_comments=True)})


@api_request_bp.post("")
@login_required
def create_request():
    payload = request.get_json(silent=True) or {}
    resource_request = RequestService.create_request(actor(), payload)
    return jsonify({"request": request_data(resource_request, viewer=current_user)}), 201


@api_request_bp.patch("/<int:request_id>")
@login_required
def update_request(request_id):
    payload = request.get_json(silent=True) or {}
    resource_request = RequestService.update_request(actor(), request_id, payload)
    return jsonify({"request": request_data(resource_request, viewer=current_user)})


@api_request_bp.delete("/<int:request_id>")
@login_required
def delete_request(request_id):
    RequestService.delete_request(actor(), request_id)
    return jsonify({"msg": "Success! Request removed."})


@api_request_bp.post("/<int:request_id>/comment")
@login_required
def comment_request(request_id):
    payload = request.get_json(silent=True) or {}
    comment = RequestService.add_comment(actor(), request_id, payload.get("text"))
    return jsonify({"msg": "Comment added successfully", "comment": comment_data(comment)}), 201


@api_request_bp.post("/<int:request_id>/upvote")
@login_required
def upvote_request(request_id):
    _, has_upvoted, upvotes_count = RequestService.toggle_upvote(actor(), request_id)
    return jsonify(
        {
            "msg": "Request upvoted" if has_upvoted else "Upvote removed",
            "upvotes_count": upvotes_count,
            "has_upvoted": has_upvoted,
        }
    )


@api_request_bp.post("/<int:request_id>/fulfill")
@login_required
def fulfill_request(request_id):
    payload = request.get_json(silent=True) or {}
    resource_request = RequestService.fulfill(actor(), request_id, payload.get("resourceId"))
    return jsonify({"msg": "Request fulfilled successfully", "request": request_data(resource_request)})
