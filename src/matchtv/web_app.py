# src/matchtv/web_app.py
from flask import Flask, jsonify, render_template_string
import logging

from .schedule_cache import ScheduleCache

logger = logging.getLogger(__name__)

SCHEDULE_TEMPLATE = """
<html>
	<head>
		<title>Match på TV:n</title>
	</head>
	<body>
		Fotboll på TV:n.

		{% for day, matches in schedule.items() %}
			<h2>{{ day }}</h2>
			<ul>
				{% for match in matches %}
					<li>{{ match }}</li>
				{% endfor %}
			</ul>
		{% endfor %}
	</body>
</html>
"""


def create_app(cache: ScheduleCache) -> Flask:
    """Creates the Flask app serving the cached schedule."""
    app = Flask(__name__)

    def current_schedule():
        # Refresh failures are logged by the cache; we serve whatever it holds
        cache.refresh_if_stale()
        return cache.get_schedule() or {}

    @app.route('/', methods=['GET'])
    def index():
        logger.debug("Incoming request for schedule page")
        return render_template_string(SCHEDULE_TEMPLATE, schedule=current_schedule())

    @app.route('/api/schedule', methods=['GET'])
    def get_schedule():
        """JSON view of the same schedule the HTML page shows."""
        cache.refresh_if_stale()
        schedule, last_refresh = cache.snapshot()
        schedule = schedule or {}
        return jsonify({
            'last_refresh': last_refresh.isoformat() if last_refresh else None,
            'days': {day: [match.to_dict() for match in matches]
                     for day, matches in schedule.items()},
        }), 200

    @app.route('/status', methods=['GET'])
    def status():
        return jsonify({'status': 'running', **cache.status()}), 200

    return app
