"""
Auto-sync periodico de conectores ERP.

El scheduler corre dentro del proceso del API (AsyncIOScheduler) y se
llama a si mismo por HTTP: cada conector elegible se sincroniza con
POST /erp/connectors/{id}/sync, igual que si lo disparara la UI.
"""
