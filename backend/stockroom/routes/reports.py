# Overview: Flask API routes for reports; returns report rows for rendering by the client.

from flask import Blueprint, current_app, request

from ..decorators import current_principal, require_auth
from ..services import reporting_service
from ..validation import require_fields

reports_bp = Blueprint("reports", __name__, url_prefix="/api/reports")


@reports_bp.post("")
@require_auth
def generate_report_route():
    """
    Body: reportType (sales | current-stock | added-stock | low-stock),
    startDate, endDate (ISO-8601, inclusive).
    """
    data = require_fields(request.get_json(silent=True), "reportType", "startDate", "endDate")
    report = reporting_service.build_report(
        current_principal(),
        data["reportType"],
        data["startDate"],
        data["endDate"],
        low_stock_threshold=current_app.config.get("LOW_STOCK_THRESHOLD", 10),
    )
    return report, 200
