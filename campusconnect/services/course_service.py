from campusconnect.errors import BadRequestError, NotFoundError
from campusconnect.extensions import db
from campusconnect.models import Course, User, course_enrollments
from campusconnect.services.helpers import clean_text, get_active_or_404, parse_int, text_search
from campusconnect.services.notification_service import NotificationService, side_effect

TEXT_FIELDS = {
    "name": 100,
    "code": 20,
    "description": 500,
    "university": 100,
    "department": 100,
    "semester": 20,
    "instructor": 100,
}


class CourseService:
    @staticmethod
    def _apply_payload(course, payload):
        for field, max_length in TEXT_FIELDS.items():
            if field not in payload:
                continue
            value = clean_text(payload.get(field), f"Course {field}")
            if len(value) > max_length:
                raise BadRequestError(f"Course {field} must be at most {max_length} characters.")
            setattr(course, field, value or None)
        if "year" in payload:
            course.year = parse_int(payload.get("year"), "Year", minimum=2020, maximum=2030)
        if "credits" in payload:
            course.credits = parse_int(payload.get("credits"), "Credits", minimum=1, maximum=6)

        if not course.name or not course.code or not course.university or not course.department:
            raise BadRequestError("Please provide course name, code, university and department")

    @staticmethod
    def _ensure_unique_code(course):
        query = Course.query.filter(Course.code == course.code, Course.university == course.university)
        if course.id:
            query = query.filter(Course.id != course.id)
        with db.session.no_autoflush:
            clash = query.first()
        if clash:
            raise BadRequestError("Course code already exists for this university")

    @staticmethod
    def list_courses(filters, page=1, per_page=20):
        query = Course.query.filter_by(is_active=True)
        if filters.get("university"):
            query = query.filter(Course.university.ilike(f"%{filters['university']}%"))
        if filters.get("department"):
            query = query.filter(Course.department.ilike(f"%{filters['department']}%"))
        if filters.get("search"):
            query = text_search(query, filters["search"], Course.name, Course.description)
        return query.order_by(Course.name.asc(), Course.id.asc()).paginate(
            page=page, per_page=per_page, error_out=False
        )

    @staticmethod
    def search_courses(term, limit=10):
        if not term:
            raise BadRequestError("Please provide search query")
        query = text_search(Course.query.filter_by(is_active=True), term, Course.name, Course.description)
        return query.order_by(Course.name.asc()).limit(limit).all()

    @staticmethod
    def get_course(course_id):
        return get_active_or_404(Course, course_id, "course")

    @staticmethod
    def create_course(payload):
        course = Course()
        CourseService._apply_payload(course, payload)
        CourseService._ensure_unique_code(course)
        db.session.add(course)
        db.session.commit()
        return course

    @staticmethod
    def update_course(course_id, payload):
        course = db.session.get(Course, course_id)
        if not course:
            raise NotFoundError(f"No course with id : {course_id}")
        CourseService._apply_payload(course, payload)
        CourseService._ensure_unique_code(course)
        if "is_active" in payload:
            course.is_active = bool(payload["is_active"])
        db.session.commit()
        return course

    @staticmethod
    def delete_course(course_id):
        course = db.session.get(Course, course_id)
        if not course:
            raise NotFoundError(f"No course with id : {course_id}")
        course.is_active = False
        db.session.commit()

    @staticmethod
    def enroll(course_id, user):
        course = CourseService.get_course(course_id)
        if any(student.id == user.id for student in course.enrolled_students):
            raise BadRequestError("Already enrolled in this course")
        course.enrolled_students.append(user)
        db.session.commit()

        with side_effect(f"notify user {user.id} of enrollment in course {course.id}"):
            NotificationService.notify_course_enrollment(course.id, course.name, user.id)
        return course

    @staticmethod
    def unenroll(course_id, user):
        course = db.session.get(Course, course_id)
        if not course:
            raise NotFoundError(f"No course with id : {course_id}")
        course.enrolled_students = [student for student in course.enrolled_students if student.id != user.id]
        db.session.commit()
        return course

    @staticmethod
    def courses_for_user(user_id):
        return (
            Course.query.join(course_enrollments, course_enrollments.c.course_id == Course.id)
            .filter(course_enrollments.c.user_id == user_id, Course.is_active.is_(True))
            .order_by(Course.name.asc())
            .all()
        )

    @staticmethod
    def enrolled_student_ids(course_id):
        rows = (
            db.session.query(course_enrollments.c.user_id)
            .join(User, User.id == course_enrollments.c.user_id)
            .filter(course_enrollments.c.course_id == course_id, User.is_active_user.is_(True))
            .all()
        )
        return [row.user_id for row in rows]
