from .models import Tenant, TenantMembership

class TenantMiddleware:
    """
    Sets request.tenant and request.tenant_membership for authenticated users.

    Priority:
      1) session["tenant_id"] if valid membership
      2) first membership tenant
      3) if superuser, first Tenant (fallback, no membership)
      4) else None
    """
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.tenant = None
        request.tenant_membership = None

        user = getattr(request, "user", None)
        if user and user.is_authenticated:
            # 1) session selection
            tenant_id = request.session.get("tenant_id")
            if tenant_id:
                m = (
                    TenantMembership.objects
                    .filter(user=user, tenant_id=tenant_id)
                    .select_related("tenant", "location")
                    .first()
                )
                if m:
                    request.tenant = m.tenant
                    request.tenant_membership = m

            # 2) first membership
            if request.tenant is None:
                m = TenantMembership.objects.filter(user=user).select_related("tenant", "location").first()
                if m:
                    request.tenant = m.tenant
                    request.tenant_membership = m
                    request.session["tenant_id"] = m.tenant_id

            # 3) superuser fallback
            if request.tenant is None and user.is_superuser:
                t = Tenant.objects.first()
                if t:
                    request.tenant = t
                    request.session["tenant_id"] = t.id

        return self.get_response(request)
