from flask import Blueprint, jsonify, request
from flask_login import current_user, login_required

from campusconnect.decorators import admin_required
from campusconnect.routes.api.v1.common import actor, comment_data, page_args, paginated, resource_data
from campusconnect.services import ResourceService

api_resource_bp = Blueprint("api_resource", __name__)


@api_resource_bp.get("")
def list_resources():
    page, per_page = page_args()
    resources = ResourceService.list_resources(request.args, page=page, per_page=per_page)
    return jsonify(paginated(resources, lambda r: resource_data(r, viewer=current_user)))


@api_resource_bp.get("/recent")
def recent_resources():
    limit = request.args.get("limit", default=10, type=int) or 10
    resources = ResourceService.recent_resources(limit=min(limit, 50))
    return jsonify({"resources": [resource_data(r, viewer=current_user) for r in resources]})


@api_resource_bp.get("/pinned")
def pinned_resources():
    resources = ResourceService.pinned_resources(course_id=request.args.get("course"))
    return jsonify({"resources": [resource_data(r, viewer=current_user) for r in resources]})


@api_resource_bp.get("/pending")
@login_required
@admin_required
def pending_resources():
    page, per_page = page_args()
    resources = ResourceService.pending_resources(page=page, per_page=per_page)
    return jsonify(paginated(resources, resource_data))


@api_resource_bp.get("/<int:resource_id>")
def get_resource(resource_id):
    resource = ResourceService.get_resource(resource_id)
    return jsonify({"resource": resource_data(resource, viewer=current_user, with_comments=True)})


@api_resource_bp.post("")
@login_required
def create_resource():
    payload = request.form.to_dict()
    resource = ResourceService.create_resource(actor(), payload, request.files.get("resource_file"))
    return jsonify({"resource": resource_data(resource, viewer=current_user)}), 201


@api_resource_bp.patch("/<int:resource_id>")
@login_required
def update_resource(resource_id):
    payload = request.get_json(silent=True) or {}
    resource = ResourceService.update_resource(actor(), resource_id, payload)
    return jsonify({"resource": resource_data(resource, viewer=current_user)})


@api_resource_bp.delete("/<int:resource_id>")
@login_required
def delete_resource(resource_id):
    ResourceService.delete_resource(actor(), resource_id)
    return jsonify({"msg": "Success! Resource removed."})


@api_resource_bp.post("/<int:resource_id>/like")
@login_required
def like_resource(resource_id):
    _, is_liked, likes_count = ResourceService.toggle_like(actor(), resource_id)
    return jsonify(
        {
            "msg": "Resource liked" if is_liked else "Like removed",
            "likes_count": likes_count,
            "is_liked": is_liked,
        }
    )


@api_resource_bp.post("/<int:resource_id>/comment")
@login_required
def comment_resource(resource_id):
    payload = request.get_json(silent=True) or {}
    comment = ResourceService.add_comment(actor(), resource_id, payload.get("text"))
    return jsonify({"msg": "Comment added successfully", "comment": comment_data(comment)}), 201


@api_resource_bp.get("/<int:resource_id>/download")
@login_required
def download_resource(resource_id):
    resource = ResourceService.register_download(resource_id)
    return jsonify(
        {
            "download_url": resource.file_url,
            "file_name": resource.file_name,
            "file_size": resource.file_size,
            "file_type": resource.file_type,
        }
    )


@api_resource_bp.patch("/<int:resource_id>/pin")
@login_required
@admin_required
def pin_resource(resource_id):
    resource = ResourceService.toggle_pin(resource_id)
    return jsonify(
        {
            "msg": "Resource pinned" if resource.is_pinned else "Resource unpinned",
            "is_pinned": resource.is_pinned,
        }
    )


@api_resource_bp.patch("/<int:resource_id>/approve")
@login_required
@admin_required
def approve_resource(resource_id):
    resource = ResourceService.approve(actor(), resource_id)
    return jsonify({"msg": "Resource approved", "resource": resource_data(resource)})
