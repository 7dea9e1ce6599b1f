# PrintForge - A PDF Document Producer
# Copyright (c) 2025-2026 Scott Bowman
# SPDX-License-Identifier: AGPL-3.0-or-later

import sys

from .cli import main

sys.exit(main())
