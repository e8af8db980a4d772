# Routes package init
"""
Accounting Notes Backend: API Routes Package
============================================

Route Inventory:
    - categories.py: /categories, /categories/{id}
    - topics.py:     /categories/{cid}/topics[/{id}[/notes]]
    - users.py:      /users/admin[/register|/login|/logout]
    - health.py:     /health

Routes stay thin: parse the request, call one service, wrap the result in
the {statusCode, message, data} envelope. Write endpoints depend on
require_admin.
"""
