"""
Unit tests for the Inventory SOAP Client.

Test individual components in isolation:
- SOAP envelope building, decoding and the HTTP transport
- Completeness detection and tolerant field extraction
- Retry engine (escalating timeouts, backoff, terminal classification)
- Audit log and value sanitizing
- Client facade and command line
"""
