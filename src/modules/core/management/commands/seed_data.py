from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.companies.constants import CompanyRole
from modules.companies.models import Company
from modules.orders.constants import OrderStatus
from modules.orders.dtos import StatusUpdateDTO
from modules.orders.repositories import OrderDjangoRepository, OrderHistoryDjangoLedger
from modules.orders.services import OrderLifecycleService
from modules.quotations.constants import QuotationStatus
from modules.quotations.models import Quotation, QuotationItem
from modules.quotations.pricing import QuotationItemsPricingService
from modules.quotations.repositories import QuotationDjangoRepository

SEED_NFE_ACCESS_KEY = "35240312345678000195550010000014761000047680"

# (username, password, company name, CNPJ, role)
SEED_COMPANIES = [
    ("admin", "admin123", "Plataforma B2B", "11222333000181", CompanyRole.ADMIN),
    ("fornecedor", "fornecedor123", "Distribuidora Norte", "11444777000161", CompanyRole.SUPPLIER),
    ("compras", "compras123", "Mercado Central", "45723174000110", CompanyRole.CUSTOMER),
    ("suprimentos", "suprimentos123", "Rede Sul Atacado", "34028316000103", CompanyRole.CUSTOMER),
]

CATALOG = [
    ("Papel A4 (caixa)", Decimal("189.90")),
    ("Cadeira Ergonômica", Decimal("1499.00")),
    ("Monitor 27\"", Decimal("1299.90")),
    ("Toner Laser", Decimal("349.90")),
    ("Mesa Escritório", Decimal("899.00")),
]


class Command(BaseCommand):
    help = "Seed database with realistic development data."

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        companies = self._seed_companies()
        customers = [c for c in companies if c.role == CompanyRole.CUSTOMER]
        supplier = next(c for c in companies if c.role == CompanyRole.SUPPLIER)
        quotations = self._seed_quotations(customers)
        orders_created = self._seed_orders(quotations, supplier)

        self.stdout.write(
            self.style.SUCCESS(
                "Seed completed: "
                f"companies={len(companies)}, "
                f"quotations={len(quotations)}, "
                f"orders={orders_created}"
            )
        )

    def _seed_companies(self) -> list[Company]:
        self.stdout.write("Creating users and companies...")
        User = get_user_model()
        companies: list[Company] = []
        for username, password, name, cnpj, role in SEED_COMPANIES:
            user = User.objects.filter(username=username).first()
            if user is None:
                user = User.objects.create_user(username, password=password)
            company, _ = Company.objects.get_or_create(
                cnpj=cnpj,
                defaults={"user": user, "name": name, "role": role},
            )
            companies.append(company)
        self.stdout.write(self.style.SUCCESS("Creating users and companies... Done!"))
        return companies

    def _seed_quotations(self, customers: list[Company]) -> list[Quotation]:
        self.stdout.write("Creating quotations...")
        quotations: list[Quotation] = []
        now = timezone.now()
        for customer in customers:
            for i in range(6):
                # Every sixth quotation is expired, the fifth still pending.
                status = QuotationStatus.PENDING if i == 4 else QuotationStatus.PROCESSED
                valid_until = now - timedelta(days=1) if i == 5 else now + timedelta(days=15)
                quotation = Quotation.objects.create(
                    company=customer,
                    status=status,
                    valid_until=valid_until,
                )
                for description, price in random.sample(CATALOG, k=random.randint(1, 3)):
                    QuotationItem.objects.create(
                        quotation=quotation,
                        description=description,
                        quantity=random.randint(1, 10),
                        unit_price=price,
                    )
                quotations.append(quotation)
        self.stdout.write(self.style.SUCCESS("Creating quotations... Done!"))
        return quotations

    def _seed_orders(self, quotations: list[Quotation], supplier: Company) -> int:
        self.stdout.write("Creating orders...")
        service = OrderLifecycleService(
            order_repository=OrderDjangoRepository(),
            history_ledger=OrderHistoryDjangoLedger(),
            quotation_repository=QuotationDjangoRepository(),
            pricing_service=QuotationItemsPricingService(),
        )
        # Target status of each converted order, reached step by step.
        paths = [
            [],
            [OrderStatus.PROCESSING],
            [OrderStatus.PROCESSING, OrderStatus.SHIPPED],
            [OrderStatus.PROCESSING, OrderStatus.SHIPPED, OrderStatus.DELIVERED],
            [OrderStatus.CANCELLED],
        ]

        orders_created = 0
        convertible = [
            q
            for q in quotations
            if q.status == QuotationStatus.PROCESSED and q.valid_until > timezone.now()
        ]
        for quotation, path in zip(convertible, paths * 2):
            order = service.create_from_quotation(quotation.pk, quotation.company_id)
            for target in path:
                service.update_status(
                    order_id=order.id,
                    dto=_seed_transition(target, order.id),
                    role=supplier.role,
                    requester_id=supplier.id,
                )
            orders_created += 1

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return orders_created


def _seed_transition(target: str, order_id) -> StatusUpdateDTO:
    if target == OrderStatus.SHIPPED:
        return StatusUpdateDTO(
            status=target,
            tracking_number=f"BR{str(order_id)[-8:].upper()}",
            nfe_access_key=SEED_NFE_ACCESS_KEY,
            notes="Seed shipment",
        )
    return StatusUpdateDTO(status=target, notes="Seed transition")
