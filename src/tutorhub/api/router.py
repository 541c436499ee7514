from fastapi import APIRouter

from tutorhub.api.endpoints import (
    assignment_controller,
    auth_controller,
    catalog_controller,
    course_controller,
    dashboard_controller,
    enrollment_controller,
    settings_controller,
    student_controller,
    tutor_controller,
    user_controller,
)

api_router = APIRouter()

# Auth and first-run setup
api_router.include_router(auth_controller.router)
api_router.include_router(auth_controller.setup_router)

# Users, students and own profile
api_router.include_router(user_controller.router)
api_router.include_router(user_controller.students_router)
api_router.include_router(user_controller.profile_router)

# Catalog lookups
api_router.include_router(catalog_controller.categories_router)
api_router.include_router(catalog_controller.course_types_router)
api_router.include_router(catalog_controller.course_formats_router)
api_router.include_router(catalog_controller.curriculum_router)

api_router.include_router(course_controller.router)

api_router.include_router(enrollment_controller.router)
api_router.include_router(enrollment_controller.payments_router)

api_router.include_router(assignment_controller.router)

# Portals
api_router.include_router(tutor_controller.router)
api_router.include_router(student_controller.router)

api_router.include_router(dashboard_controller.router)
api_router.include_router(settings_controller.router)
