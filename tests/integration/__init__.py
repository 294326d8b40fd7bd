"""
Integration tests for the Inventory SOAP Client.

Run against a real inventory service (marked with @pytest.mark.integration);
skipped when SOAP_ENDPOINT_URL does not answer.
"""
