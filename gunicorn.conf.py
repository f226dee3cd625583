"""
Gunicorn configuration for Crownboard.
"""
import os

# Bind to the platform's PORT or default
bind = f"0.0.0.0:{os.getenv('PORT', '8080')}"

# Worker configuration
# Requests are I/O bound on the Whop API; each one fans out to three fetch threads
workers = int(os.getenv('GUNICORN_WORKERS', '2'))
worker_class = 'gthread'
threads = int(os.getenv('GUNICORN_THREADS', '4'))
timeout = 120  # Long company histories page slowly
keepalive = 5

# Logging
accesslog = '-'  # stdout
errorlog = '-'   # stderr
loglevel = os.getenv('LOG_LEVEL', 'info').lower()
capture_output = True

# Process naming
proc_name = 'crownboard'

# Preload app for better memory usage
preload_app = True

# Graceful restart
graceful_timeout = 30


# Health check support
def on_starting(server):
    print("[Gunicorn] Starting Crownboard server...")


def on_exit(server):
    print("[Gunicorn] Crownboard server shutting down...")
