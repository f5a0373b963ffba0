#!/usr/bin/env python3
"""
Local runner for Blind Story.

By default the server runs under Gunicorn with the single eventlet worker from
gunicorn.conf.py. ``--simple`` skips Gunicorn and serves through
``socketio.run`` with the threading async mode, which is handy when eventlet is
not installed.
"""

import argparse
import os
import subprocess
import sys


def build_gunicorn_command(reload=True):
    """Gunicorn argv for the development server."""
    cmd = ['gunicorn', '--config', 'gunicorn.conf.py', '--log-level', 'info']
    if reload:
        cmd.append('--reload')
    cmd.append('wsgi:app')
    return cmd


def run_simple():
    os.environ.setdefault('SOCKETIO_ASYNC_MODE', 'threading')
    from app import create_app
    from config_factory import get_config

    app, socketio = create_app()
    config = get_config()
    print(f"Blind Story (simple mode) at http://{config.host}:{config.port}")
    socketio.run(app, host=config.host, port=config.port, debug=config.debug,
                 allow_unsafe_werkzeug=True)


def run_gunicorn(reload=True):
    port = os.environ['PORT']
    print(f"Blind Story under Gunicorn at http://localhost:{port} (Ctrl+C to stop)")
    try:
        subprocess.run(build_gunicorn_command(reload), check=True)
    except KeyboardInterrupt:
        print("\nShutting down development server...")
    except subprocess.CalledProcessError as e:
        print(f"Gunicorn exited with status {e.returncode}")
        sys.exit(1)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Run the Blind Story development server')
    parser.add_argument('--simple', action='store_true',
                        help='serve with socketio.run instead of Gunicorn')
    parser.add_argument('--no-reload', action='store_true',
                        help='disable Gunicorn auto-reload')
    parser.add_argument('--redis', metavar='URL',
                        help='use the Redis room store at URL instead of memory')
    args = parser.parse_args(argv)

    os.environ.setdefault('FLASK_ENV', 'development')
    os.environ.setdefault('PORT', '8000')
    if args.redis:
        os.environ['STORE_BACKEND'] = 'redis'
        os.environ['REDIS_URL'] = args.redis
    else:
        os.environ.setdefault('STORE_BACKEND', 'memory')

    if args.simple:
        run_simple()
    else:
        run_gunicorn(reload=not args.no_reload)


if __name__ == '__main__':
    main()
