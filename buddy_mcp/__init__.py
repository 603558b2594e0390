"""buddy_mcp — MCP tool endpoint for GitHub, Supabase and Vercel.

Provides:
    - JSON-RPC envelope handling for initialize / tools/list / tools/call
    - GitHub contents + pull request tools
    - Supabase PostgREST row tools
    - Vercel deployment + project tools
"""

__version__ = "1.0.0"
