"""Gunicorn configuration for production.

Run with: gunicorn -c gunicorn_config.py "bulk_messenger:create_app()"
"""
import multiprocessing
import os

# Server socket
port = os.getenv("PORT", "8000")
bind = f"0.0.0.0:{port}"
backlog = 2048

# Worker processes
# Each send request holds a worker for the full provider round-trip
workers_env = os.getenv("GUNICORN_WORKERS")
if workers_env:
    workers = int(workers_env)
else:
    cpu_count = multiprocessing.cpu_count()
    if cpu_count <= 2:
        workers = 2
    elif cpu_count <= 4:
        workers = 4
    else:
        workers = min(cpu_count * 2, 16)

worker_class = "sync"
worker_connections = 1000
# Must exceed DELIVERY_TIMEOUT so a slow provider call fails inside the app
timeout = int(os.getenv("GUNICORN_TIMEOUT", "60"))
keepalive = 5
graceful_timeout = 30

# Logging
accesslog = "-"  # stdout
errorlog = "-"  # stdout
loglevel = "info"
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

capture_output = True
enable_stdio_inheritance = True

# Process naming
proc_name = "bulk-messenger"
