import logging
import uuid

from flask import Flask, jsonify, render_template, request, session

from config import FLASK_SECRET_KEY
from route_weather import ClientRunners, route_summary, weather_table

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

app = Flask(__name__)
app.secret_key = FLASK_SECRET_KEY
runners = ClientRunners()


def _client_id() -> str:
    # a new lookup only supersedes the same browser session's previous one
    if "client_id" not in session:
        session["client_id"] = uuid.uuid4().hex
    return session["client_id"]


@app.get("/")
def home():
    return render_template("index.html")


@app.post("/route")
def route():
    start = request.form.get("start", "").strip()
    dest = request.form.get("dest", "").strip()
    depart = request.form.get("depart", "").strip()

    result = runners.run(_client_id(), start, dest)
    if not result.ok:
        error = result.error or "Request was superseded by a newer one"
        return render_template("index.html", error=error, start=start, dest=dest), 400

    try:
        df = weather_table(result, depart or None)
    except ValueError:
        df = weather_table(result)
    table_html = df.to_html(index=False)

    return render_template("results.html", meta=route_summary(result), table_html=table_html)


@app.get("/api/route-weather")
def route_weather_api():
    start = request.args.get("start", "")
    dest = request.args.get("dest", "")

    result = runners.run(_client_id(), start, dest)
    if not result.ok:
        return jsonify({"error": result.error or "cancelled", "weather_points": []}), 400

    points = [
        {
            "lat": p.coordinate.lat,
            "lon": p.coordinate.lon,
            "label": p.label,
            "condition": p.condition_summary,
            "is_hazard": p.is_hazard,
            "hazard_message": p.hazard_message,
            "distance_m": round(p.distance_m, 1),
            "is_error": p.is_error,
        }
        for p in result.weather_points
    ]
    return jsonify({"summary": route_summary(result), "weather_points": points})


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000)
