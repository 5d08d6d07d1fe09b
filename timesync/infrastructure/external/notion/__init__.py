"""
Integracion con Notion: cliente REST, tipos de propiedades, resolvers de
personas/deals y el upsert de time entries.

Todo es sincrono y secuencial: el rate limit de Notion se respeta con un
delay fijo antes de cada llamada.
"""
