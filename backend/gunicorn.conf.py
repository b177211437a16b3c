# Bind & workers
bind = "0.0.0.0:8000"
workers = 2  # override with env GUNICORN_WORKERS
threads = 4
timeout = 30
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr (collected by Docker)
accesslog = "-"
errorlog = "-"
loglevel = "info"  # override with env LOG_LEVEL

# Trust proxy headers; ProxyFix resolves the client address for audit
forwarded_allow_ips = "*"
proxy_protocol = False

# App factory entrypoint
wsgi_app = "authcore:create_app()"
