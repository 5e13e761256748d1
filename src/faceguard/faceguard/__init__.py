"""FaceGuard attendance kiosk package.

This package is organized by feature modules (registry, matching, attendance,
session, ...) with a thin Flask controller layer over store/service layers.
"""
