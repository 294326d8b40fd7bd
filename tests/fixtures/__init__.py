"""
Test fixtures for the Inventory SOAP Client.

Contains sample service payloads:
- consultar_articulo_ok.xml: Clean consultarArticulo response (S: prefix)
- consultar_articulo_malformed.xml: Complete envelope with a mismatched closing
  prefix, rejected by the strict decoder but recoverable
- consultar_articulo_rejected.xml: Well-formed response with exitoso=false
- actualizar_stock_ok.xml: actualizarStock response (soapenv:/tns: prefixes)
- fault.xml: SOAP Fault as sent with HTTP 500
- inventario.wsdl: Service description listing the six operations
"""
