"""
Flask API for the Tax Calculator
Serves jurisdiction tax breakdowns, scenario comparisons and saved calculations
"""

from flask import Flask, Response, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from calculation_store import CalculationStore
from config import setup_logging, get_logger
from errors import InvalidInputError, UnsupportedJurisdictionError
from registry import StrategyRegistry
from tax_calculator import TaxCalculator
from tax_models import ScenarioVariant, TaxCalculationData, TaxCalculationParams
from validators import parse_flag, parse_optional_int

setup_logging()
logger = get_logger(__name__)

app = Flask(__name__)
CORS(app)  # Enable CORS for the frontend

registry = StrategyRegistry()
calculator = TaxCalculator(registry)
app.config["CALCULATION_STORE"] = CalculationStore()

# Fields a comparison variant may override on the base request
VARIANT_FIELDS = {
    "gross_income",
    "currency_code",
    "jurisdiction_code",
    "jurisdiction_params",
    "allow_fallback",
}


def _store() -> CalculationStore:
    return app.config["CALCULATION_STORE"]


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise InvalidInputError("Request body must be a JSON object")
    return data


# ─── Global Error Handlers ───────────────────────────────────────────────────


@app.errorhandler(404)
def not_found(e):
    """Return JSON instead of HTML for 404 errors."""
    return jsonify({"error": "Resource not found"}), 404


@app.errorhandler(UnsupportedJurisdictionError)
def handle_unsupported_jurisdiction(e):
    logger.warning("Unsupported jurisdiction: %s", e.jurisdiction_code)
    return jsonify({"error": str(e), "jurisdiction_code": e.jurisdiction_code}), 404


@app.errorhandler(ValueError)
def handle_value_error(e):
    """InvalidInputError and any other ValueError become a 400 JSON response."""
    logger.warning("Invalid input: %s", e)
    return jsonify({"error": str(e)}), 400


@app.errorhandler(HTTPException)
def handle_http_exception(e):
    return jsonify({"error": e.description}), e.code


@app.errorhandler(Exception)
def handle_exception(e):
    """Catch-all for unhandled exceptions, including ConfigurationError."""
    logger.exception("Unhandled exception: %s", e)
    return jsonify({"error": "Internal server error"}), 500


@app.route("/api/health", methods=["GET"])
def health():
    """Health check endpoint"""
    return jsonify({"status": "ok", "message": "Tax Calculator API is running"})


# ─── Jurisdictions ───────────────────────────────────────────────────────────


@app.route("/api/jurisdictions", methods=["GET"])
def get_jurisdictions():
    """List every registered jurisdiction (code, name, currency)."""
    jurisdictions = calculator.list_jurisdictions()
    return jsonify({"count": len(jurisdictions), "jurisdictions": jurisdictions})


@app.route("/api/jurisdictions/<string:code>", methods=["GET"])
def get_jurisdiction(code):
    """Brackets and available deductions for one jurisdiction."""
    return jsonify(calculator.jurisdiction_info(code))


# ─── Calculation ─────────────────────────────────────────────────────────────


@app.route("/api/tax/calculate", methods=["POST"])
def calculate_tax():
    """
    Calculate a tax breakdown.

    Body (JSON):
      - gross_income: number (> 0, annual)
      - currency_code: three-letter code matching the jurisdiction
      - jurisdiction_code: e.g. "US", "UK", "IN"
      - jurisdiction_params: object (optional, jurisdiction-specific)
      - allow_fallback: bool (optional, default true)
    """
    params = TaxCalculationParams.from_dict(_json_body())
    breakdown = calculator.calculate(params)
    return jsonify(breakdown.to_dict())


@app.route("/api/tax/compare", methods=["POST"])
def compare_scenarios():
    """
    Compare what-if variants against a base calculation.

    Body (JSON):
      - base: same shape as /api/tax/calculate
      - variants: [{name, ...fields to override}]; jurisdiction_params are
        merged into the base params rather than replacing them
    """
    data = _json_body()
    base = TaxCalculationParams.from_dict(data.get("base"))

    raw_variants = data.get("variants")
    if not isinstance(raw_variants, list) or not raw_variants:
        raise InvalidInputError("variants must be a non-empty list")

    variants = []
    for i, raw in enumerate(raw_variants):
        if not isinstance(raw, dict):
            raise InvalidInputError(f"variant {i} must be an object")
        overrides = {k: v for k, v in raw.items() if k != "name"}
        unknown = set(overrides) - VARIANT_FIELDS
        if unknown:
            raise InvalidInputError(f"variant {i} has unknown field(s): {', '.join(sorted(unknown))}")
        name = raw.get("name") or f"variant_{i + 1}"
        variants.append(ScenarioVariant(name=str(name), params=base.with_overrides(**overrides)))

    comparison = calculator.compare_scenarios(base, variants)
    return jsonify(comparison.to_dict())


# ─── Saved Calculations ──────────────────────────────────────────────────────


@app.route("/api/calculations", methods=["POST"])
def save_calculation():
    """
    Calculate and save the result.
    Body: same as /api/tax/calculate, plus optional "note" (string).
    """
    data = _json_body()
    note = data.get("note", "")
    if not isinstance(note, str):
        raise InvalidInputError("note must be a string")

    breakdown = calculator.calculate(TaxCalculationParams.from_dict(data))
    saved = _store().save(TaxCalculationData.from_breakdown(breakdown, note))
    return jsonify({"calculation": saved.to_dict(), "breakdown": breakdown.to_dict()}), 201


@app.route("/api/calculations", methods=["GET"])
def list_calculations():
    """
    List saved calculations, newest first.
    Query params:
      - jurisdiction: filter by code
      - favorites: "true" to return favorites only
      - limit: max rows
    """
    limit = parse_optional_int(request.args, "limit", min_val=1)
    records = _store().list(
        jurisdiction=request.args.get("jurisdiction"),
        favorites_only=parse_flag(request.args, "favorites"),
        limit=limit,
    )
    return jsonify({"count": len(records), "calculations": [r.to_dict() for r in records]})


@app.route("/api/calculations/export", methods=["GET"])
def export_calculations():
    """Download saved calculations as CSV (same filters as the list endpoint, no limit)."""
    csv_text = _store().export_csv(
        jurisdiction=request.args.get("jurisdiction"),
        favorites_only=parse_flag(request.args, "favorites"),
    )
    return Response(
        csv_text,
        mimetype="text/csv",
        headers={"Content-Disposition": "attachment; filename=tax_calculations.csv"},
    )


@app.route("/api/calculations/<int:calculation_id>", methods=["GET"])
def get_calculation(calculation_id):
    record = _store().get(calculation_id)
    if record is None:
        return jsonify({"error": "Calculation not found"}), 404
    return jsonify(record.to_dict())


@app.route("/api/calculations/<int:calculation_id>", methods=["DELETE"])
def delete_calculation(calculation_id):
    if not _store().delete(calculation_id):
        return jsonify({"error": "Calculation not found"}), 404
    return jsonify({"deleted": calculation_id})


@app.route("/api/calculations/<int:calculation_id>/favorite", methods=["PUT"])
def set_favorite(calculation_id):
    """Body (JSON): {"is_favorite": bool}, defaults to true."""
    data = request.get_json(silent=True) or {}
    is_favorite = data.get("is_favorite", True) if isinstance(data, dict) else True
    if not isinstance(is_favorite, bool):
        raise InvalidInputError("is_favorite must be a boolean")

    record = _store().set_favorite(calculation_id, is_favorite)
    if record is None:
        return jsonify({"error": "Calculation not found"}), 404
    return jsonify(record.to_dict())


if __name__ == "__main__":
    print("\n🧾 Tax Calculator API Server")
    print("📍 Running on http://localhost:5000")
    print("\n📋 Available endpoints:")
    print("   GET    /api/health")
    print("   GET    /api/jurisdictions")
    print("   GET    /api/jurisdictions/<code>")
    print("   POST   /api/tax/calculate")
    print("   POST   /api/tax/compare")
    print("   POST   /api/calculations")
    print("   GET    /api/calculations?jurisdiction=<code>&favorites=true&limit=<n>")
    print("   GET    /api/calculations/<id>")
    print("   DELETE /api/calculations/<id>")
    print("   PUT    /api/calculations/<id>/favorite")
    print("   GET    /api/calculations/export")
    print(f"\n🌍 Jurisdictions: {', '.join(sorted(registry.list_codes()))}\n")

    app.run(debug=True, host="0.0.0.0", port=5000)
