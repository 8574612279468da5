#!/usr/bin/env python3
"""
Label Printer - Flask service for previewing and printing image labels
on tape label printers.
"""

import os

from label_printer import create_app

app = create_app()

if __name__ == '__main__':
    host = os.environ.get('LABELPRINTER_HOST', '0.0.0.0')
    port = int(os.environ.get('LABELPRINTER_PORT', 8080))
    app.logger.info(f"Starting Label Printer on http://{host}:{port}")
    app.logger.info("Press Ctrl+C to stop the server")
    app.run(host=host, port=port, debug=False)
