#!/usr/bin/env python3
"""
Deployment entry point for the US Presence Map dashboard
"""

import os

from dashboard import app

# Export server for Gunicorn
server = app.server

if __name__ == '__main__':
    port = int(os.environ.get('PORT', 8050))
    print(f"🚀 Starting dashboard on port {port}")
    print("📍 Host: 0.0.0.0")
    app.run(debug=False, host='0.0.0.0', port=port)
