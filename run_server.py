#!/usr/bin/env python
"""
Report API Server Entry Point

Usage:
    Development:  python run_server.py --dev --data ./data/northwind
    Production:   python run_server.py --data ./data/northwind

The snapshot directory may also be given through REPORTS_DATA_PATH.
"""

import argparse
import os


def run_dev_server(port: int):
    """Run development server with auto-reload."""
    import uvicorn
    
    uvicorn.run(
        "northwind_analytics.main:app",
        host="127.0.0.1",
        port=port,
        reload=True,
        reload_dirs=["northwind_analytics"],
        log_level="debug",
    )


def run_prod_server(port: int):
    """Run with Uvicorn workers; each worker loads its own snapshot copy."""
    import uvicorn
    
    uvicorn.run(
        "northwind_analytics.main:app",
        host=os.getenv("API_HOST", "0.0.0.0"),
        port=port,
        workers=int(os.getenv("WORKERS", 2)),
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
        server_header=False,
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Northwind Analytics API Server")
    parser.add_argument("--dev", action="store_true", help="Run in development mode with auto-reload")
    parser.add_argument("--port", type=int, default=8000, help="Port to run on (default: 8000)")
    parser.add_argument("--data", help="Snapshot directory (sets REPORTS_DATA_PATH)")
    
    args = parser.parse_args()
    
    if args.data:
        os.environ["REPORTS_DATA_PATH"] = args.data
    
    if args.dev:
        run_dev_server(args.port)
    else:
        run_prod_server(args.port)
