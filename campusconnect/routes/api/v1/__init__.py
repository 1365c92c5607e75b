from flask import Blueprint

from campusconnect.routes.api.v1.achievements import api_achievement_bp
from campusconnect.routes.api.v1.auth import api_auth_bp
from campusconnect.routes.api.v1.courses import api_course_bp
from campusconnect.routes.api.v1.dashboard import api_dashboard_bp
from campusconnect.routes.api.v1.notifications import api_notification_bp
from campusconnect.routes.api.v1.resource_requests import api_request_bp
from campusconnect.routes.api.v1.resources import api_resource_bp
from campusconnect.routes.api.v1.study_groups import api_study_group_bp
from campusconnect.routes.api.v1.users import api_user_bp

api_v1_bp = Blueprint("api_v1", __name__)
api_v1_bp.register_blueprint(api_auth_bp, url_prefix="/auth")
api_v1_bp.register_blueprint(api_user_bp, url_prefix="/users")
api_v1_bp.register_blueprint(api_course_bp, url_prefix="/courses")
api_v1_bp.register_blueprint(api_resource_bp, url_prefix="/resources")
api_v1_bp.register_blueprint(api_request_bp, url_prefix="/resource-requests")
api_v1_bp.register_blueprint(api_study_group_bp, url_prefix="/study-groups")
api_v1_bp.register_blueprint(api_notification_bp, url_prefix="/notifications")
api_v1_bp.register_blueprint(api_achievement_bp, url_prefix="/achievements")
api_v1_bp.register_blueprint(api_dashboard_bp, url_prefix="/dashboard")
