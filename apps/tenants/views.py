from django.contrib.auth.decorators import login_required
from django.http import HttpResponseForbidden, JsonResponse
from django.views.decorators.http import require_POST

from .models import Location, Tenant, TenantMembership

@login_required
def tenant_select(request):
    memberships = TenantMembership.objects.filter(user=request.user).select_related("tenant")

    # superuser may see all tenants
    tenants = [m.tenant for m in memberships]
    if request.user.is_superuser:
        tenants = list(Tenant.objects.all())

    return JsonResponse({
        "tenants": [{"id": t.id, "name": t.name, "slug": t.slug} for t in tenants],
        "current_tenant_id": request.session.get("tenant_id"),
    })

@login_required
@require_POST
def tenant_set(request, tenant_id: int):
    allowed = TenantMembership.objects.filter(user=request.user, tenant_id=tenant_id).exists()
    if request.user.is_superuser:
        allowed = Tenant.objects.filter(id=tenant_id).exists()

    if not allowed:
        return HttpResponseForbidden("Not allowed to access this tenant.")

    request.session["tenant_id"] = int(tenant_id)
    return JsonResponse({"tenant_id": int(tenant_id)})

@login_required
def location_list(request):
    tenant = request.tenant
    if tenant is None:
        return JsonResponse({"data": []})

    qs = Location.objects.filter(tenant=tenant).order_by("name")
    return JsonResponse({
        "data": [
            {
                "id": loc.id,
                "name": loc.name,
                "responsible_name": loc.responsible_name,
                "responsible_email": loc.responsible_email,
            }
            for loc in qs
        ],
    })
