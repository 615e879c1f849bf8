# SPDX-License-Identifier: AGPL-3.0-only

"""Shared infrastructure: configuration, errors, model clients and metrics."""
