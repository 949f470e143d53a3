from flask import request, g
from datetime import datetime
import logging
import json
from logging.handlers import RotatingFileHandler
import os

class RequestLogger:
    # Parameters that should never be logged
    SENSITIVE_PARAMS = {'identifier', 'password', 'token', 'jwt', 'secret', 'auth', 'key'}

    def __init__(self, app=None, log_dir: str = "logs"):
        self.log_dir = log_dir
        self.trusted_proxies = ['127.0.0.1', '::1']
        if app:
            self.init_app(app)

    def init_app(self, app):
        os.makedirs(self.log_dir, exist_ok=True)

        request_logger = logging.getLogger('request_logger')
        request_logger.propagate = False
        request_logger.setLevel(logging.DEBUG)

        # Handler for detailed DEBUG logs
        debug_handler = RotatingFileHandler(
            os.path.join(self.log_dir, 'requests.debug.log'),
            maxBytes=10000000,  # 10MB
            backupCount=10
        )
        debug_handler.setLevel(logging.DEBUG)
        debug_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        debug_handler.addFilter(lambda record: record.levelno == logging.DEBUG)
        request_logger.addHandler(debug_handler)

        # Handler for basic INFO logs
        info_handler = RotatingFileHandler(
            os.path.join(self.log_dir, 'requests.log'),
            maxBytes=10000000,  # 10MB
            backupCount=10
        )
        info_handler.setLevel(logging.INFO)
        info_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
        info_handler.addFilter(lambda record: record.levelno >= logging.INFO)
        request_logger.addHandler(info_handler)

        @app.before_request
        def before_request():
            g.request_start_time = datetime.utcnow()

        @app.after_request
        def after_request(response):
            if request.path.startswith('/static/'):
                return response

            duration = datetime.utcnow() - g.request_start_time

            # g.user is only present when an auth decorator ran for this request
            user = getattr(g, 'user', None)
            user_name = getattr(user, "username", None) or "anonymous"

            real_ip = request.headers.get('X-Real-IP')
            if real_ip and request.remote_addr in self.trusted_proxies:
                ip_address = real_ip
            else:
                ip_address = request.remote_addr

            info_entry = {
                'timestamp': datetime.utcnow().isoformat(),
                'method': request.method,
                'path': request.path,
                'status_code': response.status_code,
                'duration_ms': int(duration.total_seconds() * 1000),
            }
            request_logger.info(json.dumps(info_entry))

            debug_entry = info_entry.copy()
            debug_entry.update({
                'user': user_name,
                'ip_address': ip_address,
                'user_agent': request.user_agent.string,
                'referer': request.referrer,
            })

            if request.args:
                sanitized_params = self.sanitize(request.args)
                if sanitized_params:
                    debug_entry['query_params'] = sanitized_params

            if request.method in ['POST', 'PUT']:
                body = request.get_json(silent=True) if request.is_json else request.form
                if body:
                    sanitized_body = self.sanitize(body)
                    if sanitized_body:
                        debug_entry['request_body'] = sanitized_body

            request_logger.debug(json.dumps(debug_entry, default=str))

            return response

    def sanitize(self, params) -> dict:
        """Drop sensitive keys from a mapping of request parameters."""
        if not hasattr(params, 'items'):
            return {}
        return {
            k: v for k, v in params.items()
            if k.lower() not in self.SENSITIVE_PARAMS
        }
