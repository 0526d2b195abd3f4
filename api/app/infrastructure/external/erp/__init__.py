"""
Integraciones con ERPs externos.

- sync_invoker: POST local que dispara la sync de un conector (auto-sync).
- sap_client: lectura OData de SAP.
- record_mappers: filas OData -> registros WMS (puro, sin I/O).
"""
