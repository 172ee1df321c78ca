import pytest

from forklift_rental.domain.models import UserRole
from forklift_rental.services.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)


class TestInvite:
    def test_admin_invites_manager(self, services, manager, company):
        assert manager.role == UserRole.BUSINESS_MANAGER
        assert manager.rental_company_id == company.id
        assert manager.name == "manager"

    def test_manager_invites_operator_into_own_company(self, services, manager, company):
        operator = services.user_service.invite(
            manager, "op@hanbit.example", "OPERATOR", name="Park"
        )
        assert operator.rental_company_id == company.id
        assert operator.name == "Park"

    def test_manager_cannot_invite_manager(self, services, manager):
        with pytest.raises(PermissionDeniedError):
            services.user_service.invite(
                manager, "boss@hanbit.example", UserRole.BUSINESS_MANAGER
            )

    def test_manager_cannot_invite_elsewhere(self, services, manager, other_company):
        with pytest.raises(PermissionDeniedError):
            services.user_service.invite(
                manager,
                "op@daesung.example",
                UserRole.OPERATOR,
                rental_company_id=other_company.id,
            )

    @pytest.mark.parametrize("email", ["", "not-an-email", "a@b"])
    def test_invalid_email(self, services, admin, email):
        with pytest.raises(ValidationError) as excinfo:
            services.user_service.invite(admin, email, UserRole.OPERATION_TOOL_ADMIN)
        assert excinfo.value.field == "email"

    def test_duplicate_email_any_case(self, services, admin, manager, company):
        with pytest.raises(ValidationError) as excinfo:
            services.user_service.invite(
                admin,
                "Manager@Hanbit.example",
                UserRole.OPERATOR,
                rental_company_id=company.id,
            )
        assert excinfo.value.field == "email"

    def test_scoped_role_needs_company(self, services, admin):
        with pytest.raises(ValidationError):
            services.user_service.invite(admin, "x@example.com", UserRole.OPERATOR)

    def test_admin_has_no_company(self, services, admin, company):
        with pytest.raises(ValidationError):
            services.user_service.invite(
                admin,
                "root@example.com",
                UserRole.OPERATION_TOOL_ADMIN,
                rental_company_id=company.id,
            )

    def test_unknown_company(self, services, admin):
        with pytest.raises(NotFoundError):
            services.user_service.invite(
                admin,
                "x@example.com",
                UserRole.OPERATOR,
                rental_company_id="comp-missing",
            )

    def test_operator_cannot_invite(self, services, manager):
        operator = services.user_service.invite(manager, "op@hanbit.example", "OPERATOR")
        with pytest.raises(PermissionDeniedError):
            services.user_service.invite(operator, "op2@hanbit.example", "OPERATOR")


class TestListAndRemove:
    def test_manager_lists_own_company(self, services, admin, manager, other_manager):
        assert [u.id for u in services.user_service.list_users(manager)] == [manager.id]
        assert len(services.user_service.list_users(admin)) == 2

    def test_manager_removes_own_operator(self, services, manager):
        operator = services.user_service.invite(manager, "op@hanbit.example", "OPERATOR")
        assert services.user_service.remove(manager, operator.id)
        with pytest.raises(NotFoundError):
            services.user_service.get(operator.id)

    def test_manager_cannot_remove_peer(self, services, manager, other_manager):
        with pytest.raises(PermissionDeniedError):
            services.user_service.remove(manager, other_manager.id)
