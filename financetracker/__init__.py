"""
FinanceTracker - Client Package

The client-side controller of a chat-driven personal finance tracker.
Users type what they spent or earned ("I spent 2000 on lunch") or upload a
receipt; a webhook backend does the parsing, OCR and bookkeeping, and this
package keeps the session, the chat transcript, the transaction pages and
the dashboard in sync with it.

DESIGN PRINCIPLES:
1. The backend owns the money; the client only renders and asks
2. Show the user's own input immediately, confirm from the backend after
3. Every failure leaves a visible trace, and none takes down another view
4. No automatic retries; retrying is the user's call
5. The core knows nothing about the rendering surface
"""

__version__ = "1.0.0"
__author__ = "FinanceTracker Team"
