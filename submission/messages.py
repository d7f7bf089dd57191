"""
Localized copy for validation errors and submission views (English and Thai).
"""

from typing import Dict

from submission.categories import CategoryConfig

SUPPORTED_LANGUAGES = ("en", "th")

_MESSAGES: Dict[str, Dict[str, str]] = {
    "en": {
        "required": "This field is required",
        "invalid_email": "Please enter a valid email address",
        "invalid_age": "Age must be between {min_age} and {max_age} years",
        "invalid_age_unbounded": "Age must be at least {min_age} years",
        "format_required": "Please select a film format",
        "all_agreements_required": "Please accept all agreements",
        "invalid_duration": "Please enter a valid duration",
        "invalid_file_type": "Unsupported file type. Allowed: {extensions}",
        "auth_required_draft": "Please sign in before saving draft",
        "auth_required_submit": "Please sign in before submitting your work",
        "age_over_limit": (
            "Your age ({age} years) exceeds the limit. This competition is only open "
            "to participants aged {min_age}-{max_age} years old."
        ),
        "submit_failed": "An error occurred while submitting. Please try again.",
        "confirm_title": "Confirm Submission",
        "confirm_message": (
            "Your application is currently in draft mode. Please review your submission carefully "
            "before sending it. You will not be able to edit after submission."
        ),
        "confirm_cancel": "Cancel",
        "confirm_submit": "Confirm Submission",
        "success_title": "Submission successful!",
        "success_message": (
            "The festival will announce the selection results within 30 days. "
            "Thank you for submitting to CIFAN 2025 (Submission ID: {submission_id})"
        ),
        "go_to_applications": "Go to My Applications",
        "back_home": "Back to Home",
        "error_title": "Submission Error",
        "retry": "Try Again",
        "sign_in": "Sign In",
        "ineligible_title": "Access Restricted",
        "ineligible_message": (
            "Your age ({age} years) exceeds the limit for {title} which is only open "
            "to participants aged {min_age}-{max_age} years old."
        ),
        "recommended_title": "Recommended for You",
        "recommended_message": "Based on your age, we recommend applying for:",
        "go_to_recommended": "Go to Recommended Competition",
        "check_profile": "Check Profile",
    },
    "th": {
        "required": "กรุณากรอกข้อมูลนี้",
        "invalid_email": "กรุณากรอกอีเมลที่ถูกต้อง",
        "invalid_age": "อายุต้องอยู่ระหว่าง {min_age}-{max_age} ปี",
        "invalid_age_unbounded": "อายุต้องไม่ต่ำกว่า {min_age} ปี",
        "format_required": "กรุณาเลือกรูปแบบภาพยนตร์",
        "all_agreements_required": "กรุณายอมรับข้อตกลงทั้งหมด",
        "invalid_duration": "กรุณากรอกความยาวที่ถูกต้อง",
        "invalid_file_type": "ประเภทไฟล์ไม่รองรับ รองรับเฉพาะ: {extensions}",
        "auth_required_draft": "กรุณาเข้าสู่ระบบก่อนบันทึกร่าง",
        "auth_required_submit": "กรุณาเข้าสู่ระบบก่อนส่งผลงาน",
        "age_over_limit": (
            "อายุของคุณเกินกำหนด ({age} ปี) การประกวดนี้เปิดรับเฉพาะผู้ที่มีอายุ {min_age}-{max_age} ปี เท่านั้น"
        ),
        "submit_failed": "เกิดข้อผิดพลาดในการส่งผลงาน กรุณาลองใหม่อีกครั้ง",
        "confirm_title": "ยืนยันการส่งผลงาน",
        "confirm_message": (
            "ใบสมัครของคุณอยู่ในโหมดร่าง กรุณาตรวจสอบข้อมูลให้ถูกต้องก่อนส่ง เมื่อส่งแล้วจะไม่สามารถแก้ไขได้อีก"
        ),
        "confirm_cancel": "ยกเลิก",
        "confirm_submit": "ยืนยันการส่ง",
        "success_title": "ส่งผลงานเรียบร้อยแล้ว!",
        "success_message": (
            "ทางเทศกาลจะแจ้งผลการคัดเลือกภายใน 30 วัน ขอบคุณที่ส่งผลงานเข้าร่วม CIFAN 2025 "
            "(รหัสการส่ง: {submission_id})"
        ),
        "go_to_applications": "ไปยังใบสมัครของฉัน",
        "back_home": "กลับหน้าหลัก",
        "error_title": "เกิดข้อผิดพลาด",
        "retry": "ลองอีกครั้ง",
        "sign_in": "เข้าสู่ระบบ",
        "ineligible_title": "ไม่สามารถเข้าถึงได้",
        "ineligible_message": (
            "อายุของคุณ ({age} ปี) เกินกำหนดสำหรับการประกวด {title} "
            "ที่เปิดรับเฉพาะผู้ที่มีอายุ {min_age}-{max_age} ปี"
        ),
        "recommended_title": "แนะนำสำหรับคุณ",
        "recommended_message": "ตามอายุของคุณ เราแนะนำให้สมัครในประเภท:",
        "go_to_recommended": "ไปยังการประกวดที่แนะนำ",
        "check_profile": "ตรวจสอบโปรไฟล์",
    },
}


def normalize_language(language: str) -> str:
    return language if language in SUPPORTED_LANGUAGES else "en"


class Messages:
    """Message lookup bound to one language."""

    def __init__(self, language: str = "en"):
        self.language = normalize_language(language)
        self._table = _MESSAGES[self.language]

    def __getitem__(self, key: str) -> str:
        return self._table[key]

    def format(self, key: str, **kwargs) -> str:
        return self._table[key].format(**kwargs)

    def invalid_age(self, config: CategoryConfig) -> str:
        if config.has_age_cap:
            return self.format("invalid_age", min_age=config.min_age, max_age=config.max_age)
        return self.format("invalid_age_unbounded", min_age=config.min_age)
