# SPDX-License-Identifier: AGPL-3.0-only

"""OCR pipeline: vision OCR, multi-page aggregation and AI reshaping."""
