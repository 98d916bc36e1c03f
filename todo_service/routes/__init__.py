# Routes package init
"""
Todo Service - API Routes Package
==================================

Route Inventory:
    - todos.py:  POST /create, GET /list, PUT /update/, DELETE /delete/, GET /count

Routes are thin: they extract the raw body and query string and delegate to
TodoService, which owns decoding, deadlines, and the response envelope.
"""
