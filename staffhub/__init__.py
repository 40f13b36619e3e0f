"""StaffHub 백엔드 패키지.

StaffHub backend package — HR / attendance API for a healthcare staffing company.
"""
