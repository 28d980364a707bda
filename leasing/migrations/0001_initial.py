import django.core.validators
import django.db.models.deletion
import leasing.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Lease',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('deleted_at', models.DateTimeField(blank=True, editable=False, null=True)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField(blank=True, help_text='Leave empty for an open-ended lease', null=True)),
                ('rent_amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('deposit_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True, validators=[django.core.validators.MinValueValidator(0)])),
                ('payment_frequency', models.CharField(choices=[('monthly', 'Monthly'), ('quarterly', 'Quarterly'), ('semi_annually', 'Semi-Annually'), ('yearly', 'Yearly')], default='monthly', max_length=15)),
                ('payment_day', models.PositiveSmallIntegerField(default=1, help_text='Day of month rent is due', validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(28)])),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('active', 'Active'), ('expired', 'Expired'), ('terminated', 'Terminated'), ('renewed', 'Renewed')], default='draft', max_length=12)),
                ('termination_date', models.DateField(blank=True, null=True)),
                ('termination_reason', models.TextField(blank=True, null=True)),
                ('notes', models.TextField(blank=True)),
                ('special_terms', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('company', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='leases', to='core.company')),
                ('tenant', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='leases', to=settings.AUTH_USER_MODEL)),
                ('unit', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='leases', to='core.unit')),
            ],
            options={
                'db_table': 'leases',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['company', 'status'], name='lease_company_status_idx'),
                    models.Index(fields=['unit', 'status'], name='lease_unit_status_idx'),
                    models.Index(fields=['tenant'], name='lease_tenant_idx'),
                    models.Index(fields=['start_date'], name='lease_start_date_idx'),
                    models.Index(fields=['end_date'], name='lease_end_date_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('end_date__isnull', True), ('end_date__gte', models.F('start_date')), _connector='OR'), name='lease_end_on_or_after_start'),
                    models.CheckConstraint(condition=models.Q(('payment_day__gte', 1), ('payment_day__lte', 28)), name='lease_payment_day_1_28'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('deleted_at', models.DateTimeField(blank=True, editable=False, null=True)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(0)])),
                ('due_date', models.DateField()),
                ('payment_date', models.DateField(blank=True, null=True)),
                ('payment_method', models.CharField(blank=True, choices=[('cash', 'Cash'), ('bank_transfer', 'Bank Transfer'), ('check', 'Check'), ('credit_card', 'Credit Card'), ('online', 'Online Payment'), ('other', 'Other')], max_length=15, null=True)),
                ('reference_number', models.CharField(blank=True, max_length=100, null=True)),
                ('check_number', models.CharField(blank=True, max_length=100, null=True)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('paid', 'Paid'), ('overdue', 'Overdue'), ('partial', 'Partial'), ('cancelled', 'Cancelled')], default='pending', max_length=10)),
                ('paid_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('remaining_amount', models.DecimalField(decimal_places=2, default=0, max_digits=10)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('lease', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='leasing.lease')),
                ('recorded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='recorded_payments', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'payments',
                'ordering': ['due_date'],
                'indexes': [
                    models.Index(fields=['lease', 'status'], name='payment_lease_status_idx'),
                    models.Index(fields=['payment_date'], name='payment_payment_date_idx'),
                    models.Index(fields=['due_date'], name='payment_due_date_idx'),
                    models.Index(fields=['status'], name='payment_status_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('deleted_at__isnull', True)), fields=('lease', 'due_date'), name='uniq_payment_due_date_per_lease'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Document',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('deleted_at', models.DateTimeField(blank=True, editable=False, null=True)),
                ('documentable_type', models.CharField(choices=[('lease', 'Lease'), ('payment', 'Payment'), ('property', 'Property'), ('unit', 'Unit')], max_length=10)),
                ('documentable_id', models.PositiveBigIntegerField()),
                ('title', models.CharField(max_length=255)),
                ('file', models.FileField(db_column='file_path', max_length=255, upload_to=leasing.models.document_upload_path)),
                ('file_name', models.CharField(blank=True, max_length=255)),
                ('file_type', models.CharField(blank=True, max_length=100, null=True)),
                ('file_size', models.PositiveBigIntegerField(blank=True, null=True)),
                ('extension', models.CharField(blank=True, max_length=10, null=True)),
                ('document_type', models.CharField(choices=[('contract', 'Contract'), ('receipt', 'Receipt'), ('invoice', 'Invoice'), ('id_document', 'ID Document'), ('proof_of_income', 'Proof of Income'), ('maintenance_report', 'Maintenance Report'), ('inspection_report', 'Inspection Report'), ('other', 'Other')], default='other', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('document_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('uploaded_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='uploaded_documents', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'documents',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['documentable_type', 'documentable_id'], name='document_documentable_idx'),
                    models.Index(fields=['document_type'], name='document_type_idx'),
                ],
            },
        ),
    ]
