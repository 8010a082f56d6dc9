"""
REST API endpoints for the storefront server
Account registration/login and the mock database query endpoint
"""

import logging

from aiohttp import web

from user_store import UserRepository, execute_query

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def get_users(request) -> UserRepository:
    return request.app['users']


async def api_register(request):
    """
    POST /api/auth/register
    Create an account

    Request body: {
        "email": "string",
        "password": "string"
    }

    Response: {
        "success": true,
        "user": {"id": number, "email": "string"}
    }
    """
    try:
        data = await request.json()
        email = data.get('email')
        password = data.get('password')

        if not email or not password or not isinstance(password, str):
            return web.json_response({
                'error': 'Email and password are required'
            }, status=400)

        if len(password) < MIN_PASSWORD_LENGTH:
            return web.json_response({
                'error': f'Password must be at least {MIN_PASSWORD_LENGTH} characters'
            }, status=400)

        users = get_users(request)
        if execute_query(users, "SELECT id FROM users WHERE email = ?", [email]):
            return web.json_response({
                'error': 'User with this email already exists'
            }, status=400)

        rows = execute_query(
            users,
            "INSERT INTO users (email, password) VALUES (?, ?) RETURNING id, email",
            [email, password]
        )
        if not rows:
            return web.json_response({'error': 'Failed to create user'}, status=500)

        user = rows[0]
        logger.info(f"Registered user {user['id']}")
        return web.json_response({
            'success': True,
            'user': {'id': user['id'], 'email': user['email']}
        })
    except Exception as e:
        logger.error(f"Registration failed: {e}")
        return web.json_response({'error': 'Internal server error'}, status=500)


async def api_login(request):
    """
    POST /api/auth/login
    Authenticate an account

    Request body: {
        "email": "string",
        "password": "string"
    }

    Response: {
        "success": true,
        "user": {"id": number, "email": "string"}
    }
    """
    try:
        data = await request.json()
        email = data.get('email')
        password = data.get('password')

        if not email or not password:
            return web.json_response({
                'error': 'Email and password are required'
            }, status=400)

        rows = execute_query(
            get_users(request),
            "SELECT id, email, password FROM users WHERE email = ?",
            [email]
        )
        # Plain text comparison
        if not rows or rows[0]['password'] != password:
            return web.json_response({
                'error': 'Invalid email or password'
            }, status=401)

        user = rows[0]
        return web.json_response({
            'success': True,
            'user': {'id': user['id'], 'email': user['email']}
        })
    except Exception as e:
        logger.error(f"Login failed: {e}")
        return web.json_response({'error': 'Internal server error'}, status=500)


async def api_db_query(request):
    """
    POST /api/db/query
    Run a raw query against the mock user store

    Request body: {
        "query": "string",
        "params": [...]
    }

    Response: {
        "rows": [...]
    }
    """
    try:
        data = await request.json()
        rows = execute_query(get_users(request), data['query'], data.get('params') or [])
        return web.json_response({'rows': rows})
    except Exception as e:
        logger.error(f"Database query failed: {e}")
        return web.json_response({'error': 'Database query failed'}, status=500)


def setup_api_routes(app):
    """Setup REST API routes on the aiohttp application."""
    app.router.add_post('/api/auth/login', api_login)
    app.router.add_post('/api/auth/register', api_register)
    app.router.add_post('/api/db/query', api_db_query)
