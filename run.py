"""
Crownboard entry point.
"""
import os
import sys
import traceback

print("[Crownboard] ========================================")
print("[Crownboard] Starting Crownboard v0.1.0")
print("[Crownboard] ========================================")

# Default to production for hosted deployment
config_name = os.getenv('FLASK_ENV', 'production')
print(f"[Crownboard] Config: {config_name}")
print(f"[Crownboard] PORT: {os.getenv('PORT', 'not set')}")
print(f"[Crownboard] WHOP_API_KEY: {'set' if os.getenv('WHOP_API_KEY') else 'NOT SET'}")

try:
    print("[Crownboard] Importing create_app...")
    from crownboard import create_app
    print("[Crownboard] Creating Flask app...")
    app = create_app(config_name)
    print(f"[Crownboard] App created, routes: {len(list(app.url_map.iter_rules()))}")
except Exception as e:
    print(f"[Crownboard] FATAL ERROR during app creation: {e}")
    traceback.print_exc()
    sys.exit(1)

if __name__ == '__main__':
    app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=config_name == 'development'
    )
